import logging
from dataclasses import dataclass, field
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

import yaml
from jsonschema import Draft7Validator

from blog_posts.config.shared_constants import (
    EXCERPT_SEPARATOR,
    FRONTMATTER_SCHEMA,
    POST_EXTENSIONS,
    REQUIRED_FRONTMATTER_FIELDS,
)
from blog_posts.models.post import INCLUDE_TAG_RE, Post
from blog_posts.services.collection import find_post_files
from blog_posts.utils.file_formats import FrontMatterError, dumps_post, loads_post
from blog_posts.utils.slugs import parse_post_filename

logger = logging.getLogger(__name__)

ERROR = "error"
WARNING = "warning"


@dataclass(frozen=True)
class LintIssue:
    path: Optional[Path]
    code: str
    message: str
    severity: str = ERROR

    def __str__(self):
        where = self.path.name if self.path else "<string>"
        return f"{where}: [{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "path": str(self.path) if self.path else None,
            "code": self.code,
            "message": self.message,
            "severity": self.severity,
        }


@dataclass
class LintReport:
    issues: List[LintIssue] = field(default_factory=list)
    files_checked: int = 0

    @property
    def errors(self) -> List[LintIssue]:
        return [issue for issue in self.issues if issue.severity == ERROR]

    @property
    def warnings(self) -> List[LintIssue]:
        return [issue for issue in self.issues if issue.severity == WARNING]

    @property
    def ok(self) -> bool:
        return not self.errors

    def extend(self, issues: Iterable[LintIssue]) -> None:
        self.issues.extend(issues)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "files_checked": self.files_checked,
            "errors": len(self.errors),
            "warnings": len(self.warnings),
            "issues": [issue.to_dict() for issue in self.issues],
        }


def _jsonable(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    return value


class PostLinter:
    """Content-integrity checks for single posts and whole collections."""

    def __init__(
        self,
        required_fields: Sequence[str] = REQUIRED_FRONTMATTER_FIELDS,
        excerpt_separator: str = EXCERPT_SEPARATOR,
        extensions: Sequence[str] = POST_EXTENSIONS,
        check_round_trip: bool = True,
    ):
        self.required_fields = list(required_fields)
        self.excerpt_separator = excerpt_separator
        self.extensions = list(extensions)
        self.check_round_trip = check_round_trip
        schema = {**FRONTMATTER_SCHEMA, "required": self.required_fields}
        self.validator = Draft7Validator(schema)

    def lint_text(self, text: str, path: Optional[Path] = None) -> List[LintIssue]:
        try:
            post = loads_post(text, path)
        except FrontMatterError as e:
            return [LintIssue(path, "front-matter", str(e))]
        return self.lint_post(post)

    def _load(self, path: Path):
        """Read and parse a file, returning the post or the issue that stopped it."""
        try:
            with path.open("r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"Failed to read {path}: {e}")
            return None, LintIssue(path, "read", str(e))

        try:
            return loads_post(text, path), None
        except FrontMatterError as e:
            return None, LintIssue(path, "front-matter", str(e))

    def lint_file(self, path) -> List[LintIssue]:
        post, issue = self._load(Path(path))
        if post is None:
            return [issue]
        return self.lint_post(post)

    def lint_post(self, post: Post) -> List[LintIssue]:
        issues = []
        issues.extend(self._check_schema(post))
        issues.extend(self._check_date(post))
        issues.extend(self._check_filename(post))
        issues.extend(self._check_truncation(post))
        issues.extend(self._check_includes(post))
        if self.check_round_trip:
            issues.extend(self._check_round_trip(post))
        return issues

    def lint_posts(self, posts: Iterable[Post]) -> LintReport:
        """Lint already-parsed posts, including the slug uniqueness check."""
        report = LintReport()
        posts = list(posts)
        for post in posts:
            report.files_checked += 1
            report.extend(self.lint_post(post))
        report.extend(self._check_unique_slugs(posts))
        return report

    def lint_paths(self, paths: Iterable) -> LintReport:
        """Lint files and directories of posts."""
        report = LintReport()
        parsed = []
        for path in self._expand(paths):
            report.files_checked += 1
            post, issue = self._load(path)
            if post is None:
                report.extend([issue])
                continue

            parsed.append(post)
            report.extend(self.lint_post(post))

        report.extend(self._check_unique_slugs(parsed))
        logger.info(
            f"Checked {report.files_checked} files: "
            f"{len(report.errors)} errors, {len(report.warnings)} warnings"
        )
        return report

    def _expand(self, paths: Iterable) -> List[Path]:
        files = []
        for path in map(Path, paths):
            if path.is_dir():
                files.extend(find_post_files(path, self.extensions))
            elif path.exists():
                files.append(path)
            else:
                raise FileNotFoundError(f"No such file or directory: {path}")
        return list(dict.fromkeys(files))

    # Individual checks

    def _check_schema(self, post: Post) -> List[LintIssue]:
        issues = []
        metadata = _jsonable(post.to_dict())
        for error in sorted(self.validator.iter_errors(metadata), key=lambda e: [str(p) for p in e.path]):
            if error.validator == "required":
                issues.append(LintIssue(post.path, "required-key", error.message))
            else:
                key = ".".join(str(part) for part in error.path) or "front matter"
                issues.append(LintIssue(post.path, "schema", f"{key}: {error.message}"))
        return issues

    def _check_date(self, post: Post) -> List[LintIssue]:
        if post.get("date") is None:
            return []
        try:
            post.published
        except ValueError as e:
            return [LintIssue(post.path, "date", str(e))]
        return []

    def _check_filename(self, post: Post) -> List[LintIssue]:
        if post.path is None:
            return []
        try:
            filename_date, _ = parse_post_filename(post.path.name)
        except ValueError as e:
            return [LintIssue(post.path, "filename", str(e))]

        try:
            published = post.published
        except ValueError:
            return []
        if published is not None and published.date() != filename_date:
            return [LintIssue(
                post.path,
                "filename-date",
                f"Filename date {filename_date} differs from date {published.date()}",
                WARNING,
            )]
        return []

    def _check_truncation(self, post: Post) -> List[LintIssue]:
        separator = self.excerpt_separator
        count = post.marker_count(separator)
        if count == 0:
            return []
        if count > 1:
            return [LintIssue(post.path, "truncation", f"Truncation marker {separator!r} occurs {count} times")]

        before, after = post.body.split(separator, 1)
        if not before.strip():
            return [LintIssue(post.path, "truncation", "Truncation marker precedes all body text")]
        if not after.strip():
            return [LintIssue(post.path, "truncation", "Truncation marker follows all body text")]
        return []

    def _check_includes(self, post: Post) -> List[LintIssue]:
        body = post.body
        opened = len(INCLUDE_TAG_RE.findall(body))
        if opened > len(post.includes):
            return [LintIssue(post.path, "include", "Include directive without a fragment name")]
        return []

    def _check_round_trip(self, post: Post) -> List[LintIssue]:
        try:
            reparsed = loads_post(dumps_post(post), post.path)
        except (FrontMatterError, yaml.YAMLError, TypeError) as e:
            return [LintIssue(post.path, "round-trip", f"Re-serialized document does not parse: {e}")]

        if list(reparsed.metadata.items()) != list(post.metadata.items()):
            return [LintIssue(post.path, "round-trip", "Front matter changed after re-serializing")]
        if reparsed.body != post.body:
            return [LintIssue(post.path, "round-trip", "Body changed after re-serializing")]
        return []

    def _check_unique_slugs(self, posts: List[Post]) -> List[LintIssue]:
        by_slug: Dict[Optional[str], List[Post]] = {}
        for post in posts:
            by_slug.setdefault(post.slug, []).append(post)

        issues = []
        for slug, group in by_slug.items():
            if slug is None:
                for post in group:
                    issues.append(LintIssue(post.path, "slug", "Post has no slug"))
                continue
            if len(group) < 2:
                continue
            names = ", ".join(p.path.name if p.path else "<string>" for p in group)
            for post in group:
                issues.append(LintIssue(post.path, "duplicate-slug", f"Slug {slug!r} used by {names}"))
        return issues
