"""File-system helpers shared by loaders: hashing, reading and writing."""

from __future__ import annotations

import hashlib
from pathlib import Path
from typing import Callable

from .errors import FileAccessError, WriteError

Hasher = Callable[[bytes], str]


def digest_bytes(content: bytes) -> str:
    """Return the hex SHA-256 digest of ``content``."""
    return hashlib.sha256(content).hexdigest()


def read_source(path: str | Path) -> bytes:
    """Read an input file, translating OS failures into ``FileAccessError``."""
    try:
        return Path(path).read_bytes()
    except OSError as exc:
        raise FileAccessError(f"Cannot read {path}: {exc}") from exc


def write_output(path: str | Path, content: str, *, check_diff: bool = False) -> bool:
    """Write ``content`` to ``path``, creating parent directories.

    With ``check_diff`` the write is skipped when the file already holds the
    same bytes. Returns True when the file was written.
    """
    target = Path(path)
    encoded = content.encode("utf-8")
    try:
        if check_diff and target.is_file():
            if digest_bytes(target.read_bytes()) == digest_bytes(encoded):
                return False
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(encoded)
    except OSError as exc:
        raise WriteError(f"Cannot write {target}: {exc}") from exc
    return True


__all__ = ["Hasher", "digest_bytes", "read_source", "write_output"]
