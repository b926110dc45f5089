import os
import re
import json
import logging
from datetime import date, datetime
from pathlib import Path
from typing import Optional, Union

import frontmatter
import yaml
from frontmatter.default_handlers import YAMLHandler

from blog_posts.models.post import Post

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

PathLike = Union[str, os.PathLike]

LEADING_BLANK_LINES_RE = re.compile(r"\A(?:[ \t]*\n)+")


class FrontMatterError(ValueError):
    """A document whose front matter block is missing or malformed."""


def loads_post(text: str, path: Optional[PathLike] = None) -> Post:
    """Parse a document into a Post, keeping the front matter key order."""
    text = text.lstrip("\ufeff").replace("\r\n", "\n")
    handler = YAMLHandler()
    where = f" in {path}" if path else ""

    if not handler.detect(text):
        raise FrontMatterError(f"Missing front matter block{where}")

    try:
        fm, content = handler.split(text)
    except ValueError:
        raise FrontMatterError(f"Unterminated front matter block{where}")

    try:
        metadata = handler.load(fm)
    except yaml.YAMLError as e:
        raise FrontMatterError(f"Invalid YAML front matter{where}: {e}")

    if metadata is None:
        metadata = {}
    if not isinstance(metadata, dict):
        raise FrontMatterError(
            f"Front matter{where} must be a mapping, got {type(metadata).__name__}"
        )

    return Post(metadata, LEADING_BLANK_LINES_RE.sub("", content).rstrip(), path)


def load_post(path: PathLike) -> Post:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Post not found: {path}")

    with path.open("r", encoding="utf-8") as f:
        return loads_post(f.read(), path)


def dumps_post(post: Post) -> str:
    """Serialize a Post back to `---` delimited YAML plus body."""
    fm_post = frontmatter.Post(post.body)
    fm_post.metadata.update(post.to_dict())
    return frontmatter.dumps(fm_post, handler=YAMLHandler(), sort_keys=False) + "\n"


def dump_post(post: Post, path: Optional[PathLike] = None) -> Path:
    target = Path(path) if path is not None else post.path
    if target is None:
        raise ValueError("No path given and the post has none")

    target.parent.mkdir(parents=True, exist_ok=True)
    try:
        with target.open("w", encoding="utf-8", newline="\n") as f:
            f.write(dumps_post(post))
    except OSError as e:
        logger.error(f"Failed to write post {target}: {e}")
        raise

    logger.info(f"Post written to {target}")
    return target


def _json_default(value):
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    if isinstance(value, Path):
        return str(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def write_to_json(data, output_dir: PathLike, filename: str = "posts.json") -> str:
    os.makedirs(output_dir, exist_ok=True)
    output_path = os.path.join(output_dir, filename)

    with open(output_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2, ensure_ascii=False, default=_json_default)

    return output_path
