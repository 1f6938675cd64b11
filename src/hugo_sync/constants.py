from __future__ import annotations

from pathlib import Path

DEFAULT_CONFIG_PATH = Path("config.toml")
ENV_PREFIX = "HUGO_SYNC_"

IMAGE_EXTENSIONS = ("png", "jpg", "jpeg", "gif", "webp", "svg")
MARKDOWN_SUFFIXES = (".md", ".markdown")
WEB_SCHEMES = ("http://", "https://")

NOTICE_DURATION_MS = 10000

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "ENV_PREFIX",
    "IMAGE_EXTENSIONS",
    "MARKDOWN_SUFFIXES",
    "NOTICE_DURATION_MS",
    "WEB_SCHEMES",
]
