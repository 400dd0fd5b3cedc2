"""Core data models shared across assetgen components."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from .fs import Hasher, digest_bytes, read_source

REMOVED_FINGERPRINT = "<removed>"


@dataclass(frozen=True)
class ChangeDescriptor:
    """A file path plus the fingerprint of its content when it was observed."""

    filepath: str
    fingerprint: str

    @classmethod
    def capture(
        cls,
        filepath: str | Path,
        fingerprint: str | None = None,
        *,
        hasher: Hasher = digest_bytes,
    ) -> "ChangeDescriptor":
        """Describe ``filepath`` as it is on disk right now.

        The file is read and hashed unless the caller already knows the
        fingerprint. Raises ``FileAccessError`` when the file cannot be read.
        """
        path = _normalise(filepath)
        if fingerprint is None:
            fingerprint = hasher(read_source(path))
        return cls(filepath=path, fingerprint=fingerprint)

    @classmethod
    def removed(cls, filepath: str | Path) -> "ChangeDescriptor":
        """Describe a file that no longer exists."""
        return cls(filepath=_normalise(filepath), fingerprint=REMOVED_FINGERPRINT)

    @property
    def is_removal(self) -> bool:
        return self.fingerprint == REMOVED_FINGERPRINT


def _normalise(filepath: str | Path) -> str:
    return Path(os.path.abspath(os.fspath(filepath))).as_posix()


__all__ = ["ChangeDescriptor", "REMOVED_FINGERPRINT"]
