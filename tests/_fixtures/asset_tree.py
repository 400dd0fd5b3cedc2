"""Helper utilities for laying out throwaway asset source trees in tests."""

from __future__ import annotations

import textwrap
from pathlib import Path
from typing import Mapping, Union

from assetgen.matching import GlobMatcher

Content = Union[str, bytes]


class AssetTree:
    """Writes source files under a temporary project root."""

    def __init__(self, tmp_path: Path) -> None:
        self.root = tmp_path / "project"
        self.root.mkdir()
        self.root = self.root.resolve()
        self.matcher = GlobMatcher(self.root)

    def write(self, files: Mapping[str, Content]) -> None:
        """Write `path -> contents` entries; text is dedented, bytes written as-is."""
        for relative, content in files.items():
            path = self.root / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            if isinstance(content, bytes):
                path.write_bytes(content)
            else:
                path.write_text(textwrap.dedent(content).lstrip("\n"), encoding="utf-8")

    def path(self, relative: str) -> str:
        """Return the absolute posix path of a project file."""
        return (self.root / relative).as_posix()

    def read(self, relative: str) -> str:
        return (self.root / relative).read_text(encoding="utf-8")

    def exists(self, relative: str) -> bool:
        return (self.root / relative).exists()


__all__ = ["AssetTree"]
