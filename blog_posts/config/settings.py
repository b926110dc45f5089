import os
import logging
from pathlib import Path
from typing import Any, Dict, Optional

import json5
from dotenv import load_dotenv

from blog_posts.config.shared_constants import (
    DEFAULT_PERMALINK,
    EXCERPT_SEPARATOR,
    POST_EXTENSIONS,
    REQUIRED_FRONTMATTER_FIELDS,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = "blog.json5"

DEFAULTS: Dict[str, Any] = {
    "posts_dir": "source/_posts",
    "extensions": POST_EXTENSIONS,
    "required_fields": REQUIRED_FRONTMATTER_FIELDS,
    "excerpt_separator": EXCERPT_SEPARATOR,
    "permalink": DEFAULT_PERMALINK,
    "default_layout": "post",
    "default_extension": ".markdown",
    "log_file": None,
}

ENV_OVERRIDES = {
    "BLOG_POSTS_DIR": "posts_dir",
    "BLOG_EXCERPT_SEPARATOR": "excerpt_separator",
    "BLOG_REQUIRED_FIELDS": "required_fields",
    "BLOG_PERMALINK": "permalink",
    "BLOG_DEFAULT_LAYOUT": "default_layout",
    "BLOG_LOG_FILE": "log_file",
}


def load_config(config_path) -> Dict[str, Any]:
    with open(config_path, "r", encoding="utf-8") as f:
        config = json5.load(f)

    if not isinstance(config, dict):
        raise ValueError(f"Config file {config_path} must contain an object")
    return config


def _merge(base: Dict[str, Any], updates: Dict[str, Any]) -> Dict[str, Any]:
    return {
        **base,
        **{k: v for k, v in updates.items() if v is not None}
    }


def _from_environment() -> Dict[str, Any]:
    values = {}
    for env_name, key in ENV_OVERRIDES.items():
        raw = os.getenv(env_name)
        if not raw:
            continue
        if key == "required_fields":
            values[key] = [field.strip() for field in raw.split(",") if field.strip()]
        else:
            values[key] = raw
    return values


def load_settings(config_path: Optional[str] = None, **overrides) -> Dict[str, Any]:
    """Resolve settings: defaults < config file < environment < explicit overrides.

    The config file may hold the keys at top level or inside a `defaults`
    block; top-level keys win over the block.
    """
    load_dotenv()
    settings = dict(DEFAULTS)

    path = Path(config_path) if config_path else Path(DEFAULT_CONFIG_FILE)
    if path.exists():
        config = load_config(path)
        settings = _merge(settings, config.get("defaults", {}))
        settings = _merge(settings, {k: v for k, v in config.items() if k != "defaults"})
        logger.debug(f"Loaded config from {path}")
    elif config_path:
        raise FileNotFoundError(f"Config file not found at {config_path}")

    settings = _merge(settings, _from_environment())
    settings = _merge(settings, overrides)

    unknown = sorted(set(settings) - set(DEFAULTS))
    if unknown:
        logger.warning(f"Ignoring unknown settings: {', '.join(unknown)}")
        for key in unknown:
            settings.pop(key)

    settings["posts_dir"] = Path(settings["posts_dir"])
    return settings
