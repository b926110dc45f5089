import logging
from collections import defaultdict
from pathlib import Path
from typing import Dict, Iterable, Iterator, List, Optional

from blog_posts.config.shared_constants import DEFAULT_PERMALINK, POST_EXTENSIONS
from blog_posts.models.post import Post
from blog_posts.utils.file_formats import load_post

logger = logging.getLogger(__name__)


class DuplicateSlugError(ValueError):
    """Two or more posts share a slug."""


def find_post_files(posts_dir, extensions: Iterable[str] = POST_EXTENSIONS) -> List[Path]:
    posts_dir = Path(posts_dir)
    if not posts_dir.is_dir():
        raise FileNotFoundError(f"Posts directory not found: {posts_dir}")

    suffixes = {ext.lower() for ext in extensions}
    return sorted(
        path for path in posts_dir.rglob("*")
        if path.is_file() and path.suffix.lower() in suffixes
    )


class PostCollection:
    """The flat set of posts in a blog, ordered by publication timestamp."""

    def __init__(self, posts: Iterable[Post], load_errors: Optional[Dict[Path, str]] = None):
        self.posts = list(posts)
        self.load_errors = load_errors or {}

    @classmethod
    def from_directory(cls, posts_dir, extensions: Iterable[str] = POST_EXTENSIONS,
                       strict: bool = True) -> "PostCollection":
        posts = []
        errors = {}
        for path in find_post_files(posts_dir, extensions):
            try:
                post = load_post(path)
                # Dates are parsed lazily, so surface a bad one while loading
                post.published
                posts.append(post)
            except ValueError as e:
                if strict:
                    logger.error(f"Failed to load {path}: {e}")
                    raise
                logger.warning(f"Skipping {path.name}: {e}")
                errors[path] = str(e)

        logger.info(f"Loaded {len(posts)} posts from {posts_dir}")
        return cls(posts, errors)

    def __len__(self):
        return len(self.posts)

    def __iter__(self) -> Iterator[Post]:
        return iter(self.posts)

    def __contains__(self, slug):
        return any(post.slug == slug for post in self.posts)

    def get(self, slug: str) -> Optional[Post]:
        for post in self.posts:
            if post.slug == slug:
                return post
        return None

    def ordered(self, newest_first: bool = True) -> List[Post]:
        """Posts in display order; posts without any date always sort last."""
        dated = [post for post in self.posts if post.published is not None]
        undated = [post for post in self.posts if post.published is None]
        dated.sort(key=lambda post: post.sort_key, reverse=newest_first)
        undated.sort(key=lambda post: post.slug or "")
        return dated + undated

    def duplicate_slugs(self) -> Dict[str, List[Optional[Path]]]:
        seen = defaultdict(list)
        for post in self.posts:
            if post.slug is not None:
                seen[post.slug].append(post.path)
        return {slug: paths for slug, paths in seen.items() if len(paths) > 1}

    def ensure_unique(self) -> None:
        duplicates = self.duplicate_slugs()
        if duplicates:
            raise DuplicateSlugError(f"Duplicate slugs: {sorted(str(s) for s in duplicates)}")

    def _group(self, attribute: str) -> Dict[str, List[Post]]:
        groups = defaultdict(list)
        for post in self.ordered():
            for label in getattr(post, attribute):
                groups[label].append(post)
        return dict(sorted(groups.items(), key=lambda item: item[0].lower()))

    def by_category(self) -> Dict[str, List[Post]]:
        return self._group("categories")

    def by_tag(self) -> Dict[str, List[Post]]:
        return self._group("tags")

    def index(self, permalink_pattern: str = DEFAULT_PERMALINK) -> List[dict]:
        return [post.to_summary(permalink_pattern) for post in self.ordered()]
