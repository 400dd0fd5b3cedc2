"""File watching built on watchdog, delivering events to a single consumer."""

from __future__ import annotations

import os
import queue
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

from watchdog.events import FileSystemEvent, FileSystemEventHandler, FileSystemMovedEvent
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from .errors import FileAccessError
from .logging import get_logger
from .matching import GlobMatcher

ADD = "add"
CHANGE = "change"
REMOVE = "remove"


@dataclass(frozen=True)
class FileEvent:
    """A single add/change/remove notification for one file."""

    kind: str
    path: str


class _QueueingHandler(FileSystemEventHandler):
    """Forwards watchdog callbacks from the observer thread to a subscription."""

    def __init__(self, subscription: "WatchSubscription") -> None:
        super().__init__()
        self._subscription = subscription

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._subscription.publish(ADD, event.src_path)

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._subscription.publish(CHANGE, event.src_path)

    def on_deleted(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._subscription.publish(REMOVE, event.src_path)

    def on_moved(self, event: FileSystemMovedEvent) -> None:
        if not event.is_directory:
            self._subscription.publish(REMOVE, event.src_path)
            self._subscription.publish(ADD, event.dest_path)


class WatchSubscription:
    """Observes the directories behind a set of glob patterns.

    The watchdog observer thread only enqueues matching events; consumers pull
    them with ``next_batch`` so that all rebuild work stays on one thread.
    """

    def __init__(
        self,
        patterns: Sequence[str],
        ignored: Optional[Iterable[str]] = None,
        *,
        matcher: GlobMatcher | None = None,
        observer: BaseObserver | None = None,
    ) -> None:
        self.patterns = list(patterns)
        self.ignored = list(ignored or [])
        self.matcher = matcher or GlobMatcher()
        self._observer = observer
        self._events: "queue.Queue[FileEvent]" = queue.Queue()
        self.logger = get_logger("watcher")

    def directories(self) -> List[Path]:
        """Return the existing base directories to observe, outermost only."""
        candidates = sorted({self.matcher.base_dir(pattern) for pattern in self.patterns})
        selected: List[Path] = []
        for directory in candidates:
            if not directory.is_dir():
                self.logger.warning("Not watching %s: directory does not exist", directory)
                continue
            if any(directory.is_relative_to(parent) for parent in selected):
                continue
            selected.append(directory)
        return selected

    def start(self) -> None:
        directories = self.directories()
        if not directories:
            raise FileAccessError(f"Nothing to watch for patterns: {', '.join(self.patterns)}")
        if self._observer is None:
            self._observer = Observer()
        handler = _QueueingHandler(self)
        for directory in directories:
            self._observer.schedule(handler, str(directory), recursive=True)
            self.logger.debug("Watching %s", directory)
        self._observer.start()

    def stop(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)

    def publish(self, kind: str, path: str | bytes) -> None:
        """Queue an event if it matches the watched patterns and is not ignored."""
        decoded = os.fsdecode(path)
        if not self.matcher.matches_any(decoded, self.patterns):
            return
        if self.ignored and self.matcher.matches_any(decoded, self.ignored):
            return
        self._events.put(FileEvent(kind=kind, path=self.matcher.absolute(decoded)))

    def next_batch(self, timeout: float | None = None, window: float = 0.0) -> List[FileEvent]:
        """Wait up to ``timeout`` for an event and return the batch to process.

        With ``window`` of zero every event is its own batch. Otherwise events
        arriving within ``window`` seconds of the first are coalesced so each
        path appears once, carrying its most recent kind.
        """
        try:
            first = self._events.get(timeout=timeout)
        except queue.Empty:
            return []
        if window <= 0:
            return [first]

        events = [first]
        deadline = time.monotonic() + window
        while True:
            remaining = deadline - time.monotonic()
            if remaining <= 0:
                break
            try:
                events.append(self._events.get(timeout=remaining))
            except queue.Empty:
                break
        return coalesce(events)


def coalesce(events: Sequence[FileEvent]) -> List[FileEvent]:
    latest: dict[str, FileEvent] = {}
    for event in events:
        latest.pop(event.path, None)
        latest[event.path] = event
    return list(latest.values())


__all__ = ["ADD", "CHANGE", "REMOVE", "FileEvent", "WatchSubscription", "coalesce"]
