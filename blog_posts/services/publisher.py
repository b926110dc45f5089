import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from blog_posts.config.shared_constants import EXCERPT_SEPARATOR, POST_EXTENSIONS
from blog_posts.models.post import Post
from blog_posts.services.collection import PostCollection
from blog_posts.utils.file_formats import dump_post
from blog_posts.utils.slugs import build_post_filename, slugify

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


class PostPublisher:
    """Scaffolds new dated posts in the posts folder."""

    def __init__(self, posts_dir, default_layout: str = "post", extension: str = ".markdown",
                 excerpt_separator: str = EXCERPT_SEPARATOR):
        self.posts_dir = Path(posts_dir)
        self.default_layout = default_layout
        self.excerpt_separator = excerpt_separator
        self.extension = extension if extension.startswith(".") else f".{extension}"
        if self.extension.lower() not in POST_EXTENSIONS:
            raise ValueError(f"Unsupported post extension: {extension}")

    def generate_frontmatter(
        self,
        title: str,
        date: Optional[datetime] = None,
        categories: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        comments: bool = True,
        layout: Optional[str] = None,
        **extra: Any,
    ) -> Dict[str, Any]:
        if not title or not title.strip():
            raise ValueError("A post needs a title")

        published = date or datetime.now()
        frontmatter_data = {
            "layout": layout or self.default_layout,
            "title": title.strip(),
            "date": published.strftime("%Y-%m-%d %H:%M"),
            "comments": comments,
        }
        if categories:
            frontmatter_data["categories"] = list(categories)
        if tags:
            frontmatter_data["tags"] = list(tags)
        frontmatter_data.update({k: v for k, v in extra.items() if v is not None})
        return frontmatter_data

    def _existing_slugs(self) -> Dict[str, Optional[Path]]:
        if not self.posts_dir.is_dir():
            return {}
        collection = PostCollection.from_directory(self.posts_dir, strict=False)
        return {post.slug: post.path for post in collection}

    def new_post(
        self,
        title: str,
        body: str = "",
        date: Optional[datetime] = None,
        with_excerpt: bool = False,
        **frontmatter_fields: Any,
    ) -> Path:
        """Write a new post and return its path. Never overwrites a post."""
        metadata = self.generate_frontmatter(title, date=date, **frontmatter_fields)
        published = date or datetime.strptime(metadata["date"], "%Y-%m-%d %H:%M")

        slug = metadata.get("slug") or slugify(metadata["title"])
        if not slug:
            raise ValueError(f"Cannot derive a slug from title {title!r}")

        output_path = self.posts_dir / build_post_filename(published.date(), slug, self.extension)
        if output_path.exists():
            raise FileExistsError(f"Post already exists: {output_path}")

        taken = self._existing_slugs()
        if slug in taken:
            raise FileExistsError(f"Slug {slug!r} is already used by {taken[slug]}")

        if with_excerpt and self.excerpt_separator not in body:
            body = f"{body.strip() or 'Summary.'}\n\n{self.excerpt_separator}\n\nMore."

        path = dump_post(Post(metadata, body.strip(), output_path))
        logger.info(f"Created new post {path.name}")
        return path
