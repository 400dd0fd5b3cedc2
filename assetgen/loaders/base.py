"""Base class for loaders: cached units of work over a glob or path."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, Iterable, List, Optional

from ..fs import Hasher, digest_bytes, read_source, write_output
from ..logging import get_logger
from ..matching import GlobMatcher, PathMatcher
from ..models import ChangeDescriptor
from ..stores import ResultCache


class Loader(ABC):
    """Contract for loaders that turn matched source files into one artifact.

    Subclasses implement ``compute`` and expose their patterns. ``load``
    decides between serving ``cache.result`` and recomputing: the cache is
    served when a change is given and either does not match the loader's
    ``watch_patterns`` or names a file whose fingerprint was already recorded.
    Without a change (full build) the loader always recomputes.
    """

    kind = "loader"

    def __init__(
        self,
        *,
        name: Optional[str] = None,
        matcher: PathMatcher | None = None,
        hasher: Hasher | None = None,
        skip_unchanged_writes: bool = False,
    ) -> None:
        self.cache = ResultCache()
        self.matcher: PathMatcher = matcher or GlobMatcher()
        self.hasher: Hasher = hasher or digest_bytes
        self.skip_unchanged_writes = skip_unchanged_writes
        self._name = name
        self.logger = get_logger(f"loaders.{self.kind}")

    @property
    def name(self) -> str:
        if self._name:
            return self._name
        paths = self.input_paths
        return f"{self.kind}:{paths[0]}" if paths else self.kind

    @property
    @abstractmethod
    def input_paths(self) -> List[str]:
        """Return every glob or path this loader depends on, transitively."""

    @property
    def watch_patterns(self) -> List[str]:
        """Return the patterns that make a change relevant to this loader."""
        return self.input_paths

    @property
    def outputs(self) -> Dict[str, Optional[str]]:
        """Return configured output targets keyed by format."""
        return {}

    def dependencies(self) -> List["Loader"]:
        """Return the loaders this loader invokes while loading."""
        return []

    def load(self, change: ChangeDescriptor | None = None) -> Any:
        if change is not None and self.is_cached(change):
            self.logger.debug(
                "Using cached %s for %s (%d input(s) recorded)", self.name, change.filepath, len(self.cache)
            )
            return self.cache.result
        self._log_rebuild(change)
        self.cache.reset()
        result = self._compute_or_reset(self.compute)
        self.cache.result = result
        self.logger.debug("%s inputs: %s", self.name, ", ".join(self.cache.paths) or "none")
        return result

    def _compute_or_reset(self, compute: Callable[[], Any]) -> Any:
        try:
            return compute()
        except Exception:
            # Fingerprints recorded before the failure must not validate a missing result.
            self.cache.reset()
            raise

    def _log_rebuild(self, change: ChangeDescriptor | None) -> None:
        if change is None:
            self.logger.info("Building %s", self.name)
        elif change.is_removal:
            self.logger.info("Rebuilding %s: %s was removed", self.name, change.filepath)
        elif self.cache.fingerprint_for(change.filepath) is not None:
            self.logger.info("Rebuilding %s: %s changed", self.name, change.filepath)
        else:
            self.logger.info("Rebuilding %s after change to %s", self.name, change.filepath)

    def is_cached(self, change: ChangeDescriptor) -> bool:
        if not self.matcher.matches_any(change.filepath, self.watch_patterns):
            return True
        return self.cache.matches_prior(change)

    @abstractmethod
    def compute(self) -> Any:
        """Recompute the artifact from scratch; the cache has just been reset."""

    # ------------------------------------------------------------------
    # Helpers for subclasses

    def collect(self, pattern: str) -> List[str]:
        files = self.matcher.expand(pattern)
        if not files:
            self.logger.warning("No files match %s; keeping previous output", pattern)
        return files

    def read(self, path: str) -> bytes:
        """Read ``path`` and record its fingerprint as an input of this result."""
        content = read_source(path)
        self.cache.record(
            ChangeDescriptor.capture(path, self.hasher(content), hasher=self.hasher)
        )
        return content

    def write(self, target: Optional[str], content: str, *, skip_empty: bool = True) -> None:
        if not target or (skip_empty and not content):
            return
        destination = self.matcher.absolute(target)
        if write_output(destination, content, check_diff=self.skip_unchanged_writes):
            self.logger.debug("Wrote %s", destination)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"


def flatten_paths(groups: Iterable[Iterable[str]]) -> List[str]:
    """Concatenate pattern lists, dropping duplicates but keeping order."""
    seen: set[str] = set()
    result: List[str] = []
    for group in groups:
        for path in group:
            if path not in seen:
                seen.add(path)
                result.append(path)
    return result


__all__ = ["Loader", "flatten_paths"]
