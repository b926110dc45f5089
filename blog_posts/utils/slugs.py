import re
from datetime import date
from typing import Tuple

from blog_posts.config.shared_constants import POST_EXTENSIONS

POST_FILENAME_RE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})-(.+?)(\.[A-Za-z]+)$")


def slugify(text):
    text = text.lower()
    text = re.sub(r"[^\w\s-]", "", text)
    return re.sub(r"[\s_]+", "-", text).strip("-")


def parse_post_filename(name: str) -> Tuple[date, str]:
    """Split a `YYYY-MM-DD-slug.md` filename into its date and slug."""
    match = POST_FILENAME_RE.match(name)
    if not match or match.group(5).lower() not in POST_EXTENSIONS:
        raise ValueError(f"Not a dated post filename: {name}")

    year, month, day, slug, _ = match.groups()
    try:
        published = date(int(year), int(month), int(day))
    except ValueError as e:
        raise ValueError(f"Invalid date in filename {name}: {e}")

    return published, slug


def is_post_filename(name: str) -> bool:
    try:
        parse_post_filename(name)
    except ValueError:
        return False
    return True


def build_post_filename(published: date, slug: str, extension: str = ".markdown") -> str:
    if not extension.startswith("."):
        extension = f".{extension}"
    return f"{published:%Y-%m-%d}-{slug}{extension}"
