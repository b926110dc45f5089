POST_EXTENSIONS = [".md", ".markdown"]

EXCERPT_SEPARATOR = "<!-- more -->"

DEFAULT_PERMALINK = "/blog/:year/:month/:day/:title/"

REQUIRED_FRONTMATTER_FIELDS = ["title", "date", "layout"]

# Order used when scaffolding a new post
RECOGNIZED_KEYS = [
    "layout",
    "title",
    "date",
    "comments",
    "category",
    "categories",
    "tags",
    "wordpress_id",
    "slug",
    "permalink",
    "published",
    "description",
]

SAMPLE_FRONTMATTER = {
    "layout": "post",
    "title": "Using QueryOver with NHibernate 3",
    "date": "2011-07-27 21:39",
    "comments": True,
    "categories": ["NHibernate", "QueryOver"],
    "wordpress_id": 341,
}

_LABELS = {
    "anyOf": [
        {"type": "string", "minLength": 1},
        {"type": "array", "items": {"type": "string", "minLength": 1}},
    ]
}

# JSON Schema for front matter. Timestamps are validated as strings after
# YAML datetimes have been converted to ISO text.
FRONTMATTER_SCHEMA = {
    "type": "object",
    "required": REQUIRED_FRONTMATTER_FIELDS,
    "properties": {
        "layout": {"type": "string", "minLength": 1},
        "title": {"type": "string", "minLength": 1},
        "date": {"type": "string"},
        "comments": {"type": "boolean"},
        "category": {"type": "string", "minLength": 1},
        "categories": _LABELS,
        "tags": _LABELS,
        "wordpress_id": {"type": ["integer", "string"]},
        "slug": {"type": "string", "pattern": r"^[^/\s]+$"},
        "permalink": {"type": "string", "pattern": r"^/"},
        "published": {"type": "boolean"},
        "description": {"type": "string"},
    },
}
