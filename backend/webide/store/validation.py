"""Name and path rules shared by every node write.

Paths are stored without a leading separator: a root node's path is its
name, a nested node's path is ``parent.path + "/" + name``. Callers at the
HTTP boundary may send a leading or trailing "/"; ``normalize_path`` strips
them so lookups always hit the stored form.
"""

from __future__ import annotations

import re

from webide.core.config import get_settings
from webide.core.errors import InvalidName, InvalidOperation

SEPARATOR = "/"

# < > : " / \ | ? * and ASCII control characters
_FORBIDDEN = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

_LANGUAGES = {
    "js": "javascript",
    "jsx": "jsx",
    "ts": "typescript",
    "tsx": "tsx",
    "css": "css",
    "scss": "scss",
    "sass": "sass",
    "html": "html",
    "htm": "html",
    "json": "json",
    "md": "markdown",
    "markdown": "markdown",
    "yml": "yaml",
    "yaml": "yaml",
    "xml": "xml",
    "svg": "svg",
    "txt": "txt",
    "env": "env",
}

_MIME_TYPES = {
    "js": "application/javascript",
    "jsx": "application/javascript",
    "ts": "application/typescript",
    "tsx": "application/typescript",
    "css": "text/css",
    "scss": "text/scss",
    "sass": "text/sass",
    "html": "text/html",
    "htm": "text/html",
    "json": "application/json",
    "md": "text/markdown",
    "markdown": "text/markdown",
    "yml": "application/yaml",
    "yaml": "application/yaml",
    "xml": "application/xml",
    "svg": "image/svg+xml",
    "txt": "text/plain",
    "env": "text/plain",
}


def validate_name(name: str | None) -> str:
    """Return ``name`` unchanged if it is a legal single path segment."""
    if name is None or name == "":
        raise InvalidName("name must not be empty")
    if name.strip() != name:
        raise InvalidName("name must not start or end with whitespace")
    if name in (".", ".."):
        raise InvalidName(f"{name!r} is a reserved name")
    match = _FORBIDDEN.search(name)
    if match:
        raise InvalidName(f"name contains forbidden character {match.group()!r}")
    if len(name) > get_settings().MAX_NAME_LENGTH:
        raise InvalidName("name is too long")
    return name


def join_path(parent_path: str | None, name: str) -> str:
    path = f"{parent_path}{SEPARATOR}{name}" if parent_path else name
    if len(path) > get_settings().MAX_PATH_LENGTH:
        raise InvalidName("path is too long")
    if path.count(SEPARATOR) >= get_settings().MAX_TREE_DEPTH:
        raise InvalidOperation("folders are nested too deeply")
    return path


def normalize_path(path: str | None) -> str:
    return (path or "").strip().strip(SEPARATOR)


def detect_language(name: str) -> tuple[str, str]:
    """Return ``(language, mime_type)`` for a file name."""
    ext = name.rsplit(".", 1)[1].lower() if "." in name else ""
    return _LANGUAGES.get(ext, "txt"), _MIME_TYPES.get(ext, "text/plain")
