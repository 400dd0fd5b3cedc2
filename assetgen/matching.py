"""Glob expansion and path matching used to decide what a loader depends on."""

from __future__ import annotations

import glob
import os
import re
from functools import lru_cache
from pathlib import Path
from typing import List, Protocol, Sequence

_MAGIC_CHARS = set("*?[{")


class PathMatcher(Protocol):
    """Capability loaders use to enumerate and test source paths."""

    def absolute(self, path: str | Path) -> str:
        ...

    def expand(self, pattern: str) -> List[str]:
        ...

    def matches(self, path: str | Path, pattern: str) -> bool:
        ...

    def matches_any(self, path: str | Path, patterns: Sequence[str]) -> bool:
        ...


class GlobMatcher:
    """Resolves glob patterns against a root directory.

    Patterns support ``*`` and ``?`` within a path segment, ``**`` across
    segments (including zero), ``[...]`` character classes and ``{a,b}``
    alternatives. Relative patterns and paths are resolved against ``root``.
    """

    def __init__(self, root: str | Path | None = None) -> None:
        self.root = Path(root).expanduser().resolve() if root is not None else Path.cwd()

    def absolute(self, path: str | Path) -> str:
        """Return ``path`` as a normalised absolute posix string."""
        joined = os.path.join(str(self.root), os.fspath(path))
        return Path(os.path.normpath(joined)).as_posix()

    def expand(self, pattern: str) -> List[str]:
        """Return the sorted, de-duplicated files matching ``pattern``."""
        found: set[str] = set()
        for alternative in expand_braces(pattern):
            absolute = self.absolute(alternative)
            if not has_magic(absolute):
                if os.path.isfile(absolute):
                    found.add(absolute)
                continue
            for match in glob.glob(absolute, recursive=True):
                if os.path.isfile(match):
                    found.add(Path(match).as_posix())
        return sorted(found)

    def matches(self, path: str | Path, pattern: str) -> bool:
        target = self.absolute(path)
        for alternative in expand_braces(pattern):
            if _compile(self.absolute(alternative)).fullmatch(target):
                return True
        return False

    def matches_any(self, path: str | Path, patterns: Sequence[str]) -> bool:
        return any(self.matches(path, pattern) for pattern in patterns)

    def base_dir(self, pattern: str) -> Path:
        """Return the deepest directory of ``pattern`` that contains no glob syntax."""
        parts: List[str] = []
        for part in Path(self.absolute(pattern)).parts:
            if has_magic(part):
                break
            parts.append(part)
        base = Path(*parts) if parts else self.root
        if not has_magic(pattern) and not base.is_dir():
            base = base.parent
        return base


def has_magic(pattern: str) -> bool:
    return any(char in _MAGIC_CHARS for char in pattern)


def expand_braces(pattern: str) -> List[str]:
    """Expand ``{a,b}`` alternatives, including nested groups."""
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    depth = 0
    options: List[str] = []
    current_start = start + 1
    for index in range(start, len(pattern)):
        char = pattern[index]
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                options.append(pattern[current_start:index])
                prefix, suffix = pattern[:start], pattern[index + 1 :]
                expanded: List[str] = []
                for option in options:
                    expanded.extend(expand_braces(f"{prefix}{option}{suffix}"))
                return expanded
        elif char == "," and depth == 1:
            options.append(pattern[current_start:index])
            current_start = index + 1
    # Unbalanced braces are taken literally.
    return [pattern]


@lru_cache(maxsize=512)
def _compile(pattern: str) -> re.Pattern[str]:
    return re.compile(translate(pattern))


def translate(pattern: str) -> str:
    """Translate a brace-free glob into a regular expression."""
    result: List[str] = []
    index = 0
    length = len(pattern)
    while index < length:
        char = pattern[index]
        if char == "*":
            if pattern.startswith("**", index):
                index += 2
                if index < length and pattern[index] == "/":
                    index += 1
                    result.append("(?:.*/)?")
                else:
                    result.append(".*")
                continue
            result.append("[^/]*")
        elif char == "?":
            result.append("[^/]")
        elif char == "[":
            end = pattern.find("]", index + 1)
            if end == -1:
                result.append(re.escape(char))
            else:
                body = pattern[index + 1 : end]
                if body.startswith("!"):
                    body = "^" + body[1:]
                result.append(f"[{body}]")
                index = end
        else:
            result.append(re.escape(char))
        index += 1
    return "".join(result)


__all__ = ["GlobMatcher", "PathMatcher", "expand_braces", "has_magic", "translate"]
