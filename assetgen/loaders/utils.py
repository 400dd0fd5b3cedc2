"""Shared helpers for embedding files and naming generated identifiers."""

from __future__ import annotations

import base64
import posixpath
import re
from pathlib import PurePosixPath
from typing import Dict, Optional, Sequence

MIMETYPES: Dict[str, str] = {
    "ttf": "font/sfnt",
    "woff": "application/octet-stream",
    "woff2": "application/octet-stream",
    "avif": "image/avif",
    "gif": "image/gif",
    "jpeg": "image/jpeg",
    "jpg": "image/jpg",
    "png": "image/png",
    "webp": "image/webp",
    "svg": "image/svg+xml",
}

_NAME_SEPARATORS = re.compile(r"[/\\ .\-()]")


def extension(path: str) -> str:
    """Return the lower-cased extension of ``path`` without the dot."""
    return PurePosixPath(path).suffix.lstrip(".").lower()


def mimetype_for(path: str) -> Optional[str]:
    return MIMETYPES.get(extension(path))


def data_url(content: bytes, mimetype: str) -> str:
    encoded = base64.b64encode(content).decode("ascii")
    return f"data:{mimetype};base64,{encoded}"


def asset_name(relative_path: str) -> str:
    """Turn a relative path into an identifier safe for SCSS and TypeScript.

    Path separators, spaces, dots, hyphens and parentheses each become ``_``.
    """
    return _NAME_SEPARATORS.sub("_", relative_path.lstrip("/\\"))


def common_path(paths: Sequence[str]) -> str:
    """Return the longest common ancestor directory of ``paths``.

    A single path yields its own directory.
    """
    if not paths:
        return ""
    if len(paths) == 1:
        return posixpath.dirname(paths[0])
    split = [path.split("/") for path in paths]
    first = split[0]
    for index, segment in enumerate(first[:-1]):
        if any(len(other) <= index + 1 or other[index] != segment for other in split[1:]):
            return "/".join(first[:index])
    return posixpath.dirname(paths[0])


def relative_to(path: str, ancestor: str) -> str:
    if not ancestor:
        return path
    prefix = ancestor.rstrip("/") + "/"
    return path[len(prefix):] if path.startswith(prefix) else path


__all__ = [
    "MIMETYPES",
    "asset_name",
    "common_path",
    "data_url",
    "extension",
    "mimetype_for",
    "relative_to",
]
