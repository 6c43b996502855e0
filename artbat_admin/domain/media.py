"""Validation rules for asset folders and file names."""
from __future__ import annotations

import re

MEDIA_EXTENSIONS = ("jpg", "jpeg", "png", "gif", "webp", "svg", "mp4", "webm")
MEDIA_PATTERN = re.compile(r"\.(" + "|".join(MEDIA_EXTENSIONS) + r")$", re.IGNORECASE)
NAME_PATTERN = re.compile(r"^[\w][\w .()+-]{0,127}$", re.UNICODE)
HTML_FILENAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+\.html$")
MAX_UPLOAD_BYTES = 50 * 1024 * 1024
DEFAULT_UPLOAD_DIR = "uploads"


def is_media_file(name: str) -> bool:
    return bool(MEDIA_PATTERN.search(name or ""))


def is_valid_name(value: str | None) -> bool:
    """A single path segment: no separators, no dot-only names."""
    if not value or value in (".", ".."):
        return False
    if "/" in value or "\\" in value:
        return False
    return bool(NAME_PATTERN.match(value))


def normalize_folder(value: str | None) -> str | None:
    """``"/a/b/"`` -> ``"a/b"``; ``""`` for the root; None for backslashes, empty or invalid segments."""
    raw = (value or "").strip()
    if "\\" in raw:
        return None
    raw = raw.strip("/")
    if not raw:
        return ""
    segments = raw.split("/")
    if not all(is_valid_name(s) for s in segments):
        return None
    return "/".join(segments)


def is_valid_html_filename(value: str | None) -> bool:
    return bool(HTML_FILENAME_PATTERN.match(value or ""))
