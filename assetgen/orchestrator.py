"""Build orchestration: one-shot builds and watch-driven rebuilds."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from .errors import AssetgenError
from .fs import Hasher, digest_bytes
from .loaders import Loader
from .loaders.base import flatten_paths
from .logging import get_logger
from .matching import GlobMatcher
from .models import ChangeDescriptor
from .watcher import CHANGE, REMOVE, FileEvent, WatchSubscription


class Subscription(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...

    def next_batch(self, timeout: float | None = None, window: float = 0.0) -> List[FileEvent]:
        ...


@dataclass
class LoaderFailure:
    """A loader (or change capture) that raised during a pass."""

    loader: str
    error: BaseException


@dataclass
class BuildReport:
    """Outcome of one pass over the top-level loaders."""

    change: Optional[ChangeDescriptor] = None
    completed: List[str] = field(default_factory=list)
    failures: List[LoaderFailure] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)
    results: Dict[str, Any] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class Orchestrator:
    """Runs an ordered collection of top-level loaders.

    ``fail_fast`` decides what a failing loader does to the rest of a pass:
    when set, the remaining loaders are skipped; otherwise every loader runs
    and all failures are collected in the report.
    """

    def __init__(
        self,
        loaders: Optional[Iterable[Loader]] = None,
        *,
        fail_fast: bool = False,
        matcher: GlobMatcher | None = None,
        hasher: Hasher | None = None,
    ) -> None:
        self._loaders: List[Loader] = list(loaders or [])
        self.fail_fast = fail_fast
        self.matcher = matcher or GlobMatcher()
        self.hasher: Hasher = hasher or digest_bytes
        self.logger = get_logger("orchestrator")

    def add(self, *loaders: Loader) -> "Orchestrator":
        self._loaders.extend(loaders)
        return self

    @property
    def loaders(self) -> Tuple[Loader, ...]:
        return tuple(self._loaders)

    def watch_patterns(self) -> List[str]:
        return flatten_paths(loader.watch_patterns for loader in self._loaders)

    def build(self) -> BuildReport:
        """Run every loader without a change, forcing a full recompute."""
        self.logger.info("Building %d loader(s)", len(self._loaders))
        report = self._run(None)
        self._log_summary(report)
        return report

    def rebuild(self, event: FileEvent | str) -> BuildReport:
        """Run every loader against the change described by ``event``."""
        if isinstance(event, str):
            event = FileEvent(kind=CHANGE, path=event)
        self.logger.info("Change (%s) in: %s. Rebuilding...", event.kind, event.path)
        try:
            if event.kind == REMOVE:
                change = ChangeDescriptor.removed(event.path)
            else:
                change = ChangeDescriptor.capture(event.path, hasher=self.hasher)
        except AssetgenError as exc:
            self.logger.error("Cannot fingerprint %s: %s", event.path, exc)
            return BuildReport(failures=[LoaderFailure(loader=event.path, error=exc)])
        report = self._run(change)
        self._log_summary(report)
        return report

    def watch(
        self,
        patterns: Optional[Sequence[str]] = None,
        ignored: Optional[Sequence[str]] = None,
        *,
        debounce: float = 0.0,
        subscription: Subscription | None = None,
        stop_event: threading.Event | None = None,
        poll_interval: float = 0.5,
    ) -> None:
        """Watch for file events and rebuild until interrupted.

        A full build runs once the subscription is established. Each event
        (or each coalesced path, when ``debounce`` is positive) then triggers
        one pass over all loaders. Loader failures are reported and the loop
        keeps running.
        """
        watched = list(patterns or self.watch_patterns())
        if subscription is None:
            subscription = WatchSubscription(watched, ignored, matcher=self.matcher)
        stop_event = stop_event or threading.Event()

        subscription.start()
        try:
            self.build()
            self.logger.info("Initial scan complete. Watching %s", ", ".join(watched))
            while not stop_event.is_set():
                for event in subscription.next_batch(timeout=poll_interval, window=debounce):
                    self.rebuild(event)
        except KeyboardInterrupt:
            self.logger.info("Stopping watch")
        finally:
            subscription.stop()

    def _run(self, change: ChangeDescriptor | None) -> BuildReport:
        report = BuildReport(change=change)
        for index, loader in enumerate(self._loaders):
            try:
                report.results[loader.name] = loader.load(change)
            except Exception as exc:
                self._log_failure(loader, exc)
                report.failures.append(LoaderFailure(loader=loader.name, error=exc))
                if self.fail_fast:
                    report.skipped = [rest.name for rest in self._loaders[index + 1 :]]
                    break
                continue
            report.completed.append(loader.name)
        return report

    def _log_failure(self, loader: Loader, exc: Exception) -> None:
        if isinstance(exc, AssetgenError):
            self.logger.error("%s failed: %s", loader.name, exc)
        else:
            self.logger.exception("%s failed unexpectedly", loader.name)

    def _log_summary(self, report: BuildReport) -> None:
        if report.skipped:
            self.logger.warning(
                "Skipped %d loader(s) after failure: %s", len(report.skipped), ", ".join(report.skipped)
            )
        if report.ok:
            self.logger.info("Build done.")
        else:
            self.logger.error("Build finished with %d failure(s)", len(report.failures))


__all__ = ["BuildReport", "LoaderFailure", "Orchestrator", "Subscription"]
