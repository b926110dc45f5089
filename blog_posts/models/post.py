import re
from datetime import date, datetime, time, timezone
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple, TypedDict, Union

from blog_posts.config.shared_constants import DEFAULT_PERMALINK, EXCERPT_SEPARATOR
from blog_posts.utils.slugs import parse_post_filename, slugify

# Jekyll's `include` and `include_relative` tags
INCLUDE_RE = re.compile(r"\{%-?\s*include(?:_relative)?\s+([^\s%-][^\s%]*)[^%]*-?%\}")
INCLUDE_TAG_RE = re.compile(r"\{%-?\s*include(?:_relative)?\b")

TIMESTAMP_FORMATS = [
    "%Y-%m-%d %H:%M:%S %z",
    "%Y-%m-%d %H:%M %z",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
]


class PostMetadata(TypedDict, total=False):
    layout: str
    title: str
    date: Union[str, date, datetime]
    comments: bool
    category: str
    categories: Union[str, List[str]]
    tags: Union[str, List[str]]
    wordpress_id: Union[int, str]
    slug: str
    permalink: str
    published: bool
    description: str


def parse_timestamp(value: Any) -> datetime:
    """Turn a front matter `date` value into a datetime."""
    if isinstance(value, datetime):
        return value
    if isinstance(value, date):
        return datetime.combine(value, time())
    if not isinstance(value, str):
        raise ValueError(f"Unsupported timestamp value: {value!r}")

    text = value.strip()
    for fmt in TIMESTAMP_FORMATS:
        try:
            return datetime.strptime(text, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(text)
    except ValueError:
        raise ValueError(f"Unrecognized timestamp: {value!r}")


def _labels(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(item).strip() for item in value if str(item).strip()]
    text = str(value).strip()
    return [text] if text else []


def _freeze(value: Any) -> Any:
    if isinstance(value, Mapping):
        return MappingProxyType({k: _freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(_freeze(item) for item in value)
    return value


def _thaw(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {k: _thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [_thaw(item) for item in value]
    return value


class Post:
    """A dated Markdown document: ordered front matter plus a free-text body.

    Posts are read-only. `replace` returns an edited copy, the way an edit
    replaces the document on disk.
    """

    __slots__ = ("_metadata", "body", "path")

    def __init__(self, metadata: Mapping[str, Any], body: str = "", path: Optional[Path] = None):
        self._metadata = {key: _freeze(value) for key, value in metadata.items()}
        self.body = body
        self.path = Path(path) if path is not None else None

    def __setattr__(self, name, value):
        if hasattr(self, "path"):
            raise AttributeError(f"Post is read-only, use replace() to change {name!r}")
        super().__setattr__(name, value)

    def __repr__(self):
        return f"Post(slug={self.slug!r}, path={str(self.path) if self.path else None!r})"

    def __eq__(self, other):
        if not isinstance(other, Post):
            return NotImplemented
        return (
            list(self._metadata.items()) == list(other._metadata.items())
            and self.body == other.body
            and self.path == other.path
        )

    __hash__ = None

    @property
    def metadata(self) -> Mapping[str, Any]:
        return MappingProxyType(self._metadata)

    def get(self, key: str, default: Any = None) -> Any:
        return self._metadata.get(key, default)

    def to_dict(self) -> Dict[str, Any]:
        """A mutable copy of the front matter, lists and all."""
        return _thaw(self._metadata)

    def replace(self, metadata: Optional[Mapping[str, Any]] = None, body: Optional[str] = None,
                path: Optional[Path] = None) -> "Post":
        return Post(
            self._metadata if metadata is None else metadata,
            self.body if body is None else body,
            self.path if path is None else path,
        )

    # Filename-derived fields

    @property
    def _filename_parts(self) -> Optional[Tuple[date, str]]:
        if self.path is None:
            return None
        try:
            return parse_post_filename(self.path.name)
        except ValueError:
            return None

    @property
    def filename_date(self) -> Optional[date]:
        parts = self._filename_parts
        return parts[0] if parts else None

    @property
    def filename_slug(self) -> Optional[str]:
        parts = self._filename_parts
        return parts[1] if parts else None

    # Metadata-derived fields

    @property
    def title(self) -> Optional[str]:
        title = self._metadata.get("title")
        return None if title is None else str(title)

    @property
    def layout(self) -> Optional[str]:
        return self._metadata.get("layout")

    @property
    def slug(self) -> Optional[str]:
        override = self._metadata.get("slug")
        if override:
            return str(override)
        if self.filename_slug:
            return self.filename_slug
        if self.title:
            return slugify(self.title) or None
        return None

    @property
    def legacy_id(self) -> Optional[Union[int, str]]:
        return self._metadata.get("wordpress_id")

    @property
    def comments_enabled(self) -> bool:
        value = self._metadata.get("comments", False)
        if isinstance(value, str):
            return value.strip().lower() in ("true", "yes", "on", "1")
        return bool(value)

    @property
    def categories(self) -> List[str]:
        labels = _labels(self._metadata.get("category")) + _labels(self._metadata.get("categories"))
        return list(dict.fromkeys(labels))

    @property
    def tags(self) -> List[str]:
        labels = _labels(self._metadata.get("tag")) + _labels(self._metadata.get("tags"))
        return list(dict.fromkeys(labels))

    @property
    def published(self) -> Optional[datetime]:
        """Publication timestamp from `date`, else from the filename."""
        value = self._metadata.get("date")
        if value is not None:
            return parse_timestamp(value)
        if self.filename_date:
            return datetime.combine(self.filename_date, time())
        return None

    @property
    def sort_key(self) -> Tuple[datetime, str]:
        published = self.published or datetime.min
        if published.tzinfo is not None:
            published = published.astimezone(timezone.utc).replace(tzinfo=None)
        return published, self.slug or ""

    # Body-derived fields

    def marker_count(self, separator: str = EXCERPT_SEPARATOR) -> int:
        return self.body.count(separator)

    def excerpt(self, separator: str = EXCERPT_SEPARATOR) -> Optional[str]:
        """Text before the truncation marker, or None without a marker."""
        if separator not in self.body:
            return None
        return self.body.split(separator, 1)[0].rstrip()

    @property
    def includes(self) -> List[str]:
        return INCLUDE_RE.findall(self.body)

    def permalink(self, pattern: str = DEFAULT_PERMALINK) -> str:
        override = self._metadata.get("permalink")
        if override:
            return str(override)

        published = self.published
        if published is None:
            raise ValueError(f"Cannot build a permalink for {self!r} without a date")

        replacements: Dict[str, str] = {
            ":categories": "/".join(slugify(c) for c in self.categories),
            ":year": f"{published:%Y}",
            ":month": f"{published:%m}",
            ":day": f"{published:%d}",
            ":title": self.slug or "",
        }
        url = pattern
        for token, value in replacements.items():
            url = url.replace(token, value)
        return re.sub(r"/{2,}", "/", url)

    def to_summary(self, permalink_pattern: str = DEFAULT_PERMALINK) -> Dict[str, Any]:
        published = self.published
        return {
            "slug": self.slug,
            "title": self.title,
            "published": published.isoformat() if published else None,
            "layout": self.layout,
            "categories": self.categories,
            "tags": self.tags,
            "comments": self.comments_enabled,
            "legacy_id": self.legacy_id,
            "url": self.permalink(permalink_pattern) if published or self.get("permalink") else None,
            "path": str(self.path) if self.path else None,
            "has_excerpt": self.excerpt() is not None,
        }
