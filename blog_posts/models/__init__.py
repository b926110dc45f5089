from .post import Post, PostMetadata, parse_timestamp

__all__ = [
    "Post",
    "PostMetadata",
    "parse_timestamp",
]
