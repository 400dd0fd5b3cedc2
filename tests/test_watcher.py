"""Tests for the watchdog-backed watch subscription."""

from __future__ import annotations

import pytest
from watchdog.events import (
    DirCreatedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
)

from assetgen.errors import FileAccessError
from assetgen.watcher import ADD, CHANGE, REMOVE, FileEvent, WatchSubscription, _QueueingHandler, coalesce


class RecordingObserver:
    def __init__(self) -> None:
        self.scheduled: list[tuple[str, bool]] = []
        self.running = False

    def schedule(self, handler, path: str, recursive: bool = False) -> None:
        self.scheduled.append((path, recursive))

    def start(self) -> None:
        self.running = True

    def stop(self) -> None:
        self.running = False

    def join(self, timeout=None) -> None:
        return None


def _subscription(asset_tree, patterns, ignored=None, observer=None) -> WatchSubscription:
    return WatchSubscription(patterns, ignored, matcher=asset_tree.matcher, observer=observer)


def test_publish_filters_by_pattern_and_ignore(asset_tree) -> None:
    subscription = _subscription(asset_tree, ["src/**/*.scss"], ["src/vendor/**"])

    subscription.publish(CHANGE, asset_tree.path("src/a.scss"))
    subscription.publish(CHANGE, asset_tree.path("src/vendor/b.scss"))
    subscription.publish(CHANGE, asset_tree.path("README.md"))

    assert subscription.next_batch(timeout=0) == [FileEvent(CHANGE, asset_tree.path("src/a.scss"))]
    assert subscription.next_batch(timeout=0) == []


def test_without_window_each_event_is_its_own_batch(asset_tree) -> None:
    subscription = _subscription(asset_tree, ["**"])
    subscription.publish(ADD, asset_tree.path("a.txt"))
    subscription.publish(CHANGE, asset_tree.path("a.txt"))

    assert subscription.next_batch(timeout=0) == [FileEvent(ADD, asset_tree.path("a.txt"))]
    assert subscription.next_batch(timeout=0) == [FileEvent(CHANGE, asset_tree.path("a.txt"))]


def test_window_coalesces_duplicate_paths(asset_tree) -> None:
    subscription = _subscription(asset_tree, ["**"])
    subscription.publish(ADD, asset_tree.path("a.txt"))
    subscription.publish(CHANGE, asset_tree.path("b.txt"))
    subscription.publish(CHANGE, asset_tree.path("a.txt"))

    batch = subscription.next_batch(timeout=0, window=0.05)

    assert batch == [
        FileEvent(CHANGE, asset_tree.path("b.txt")),
        FileEvent(CHANGE, asset_tree.path("a.txt")),
    ]


def test_coalesce_keeps_latest_kind() -> None:
    events = [FileEvent(ADD, "/a"), FileEvent(REMOVE, "/a")]

    assert coalesce(events) == [FileEvent(REMOVE, "/a")]


def test_handler_translates_watchdog_events(asset_tree) -> None:
    subscription = _subscription(asset_tree, ["**"])
    handler = _QueueingHandler(subscription)
    src, dest = asset_tree.path("a.txt"), asset_tree.path("b.txt")

    handler.on_created(FileCreatedEvent(src))
    handler.on_modified(FileModifiedEvent(src))
    handler.on_deleted(FileDeletedEvent(src))
    handler.on_moved(FileMovedEvent(src, dest))
    handler.on_created(DirCreatedEvent(asset_tree.path("newdir")))

    kinds = [subscription.next_batch(timeout=0) for _ in range(6)]
    assert kinds == [
        [FileEvent(ADD, src)],
        [FileEvent(CHANGE, src)],
        [FileEvent(REMOVE, src)],
        [FileEvent(REMOVE, src)],
        [FileEvent(ADD, dest)],
        [],
    ]


def test_directories_keep_outermost_existing(asset_tree) -> None:
    asset_tree.write({"src/fonts/A.ttf": b"", "src/cv.scss": ""})
    subscription = _subscription(asset_tree, ["src/fonts/*.ttf", "src/**/*.scss", "missing/**"])

    assert [path.as_posix() for path in subscription.directories()] == [asset_tree.path("src")]


def test_start_schedules_recursive_watches(asset_tree) -> None:
    asset_tree.write({"src/cv.scss": "", "img/a.png": b""})
    observer = RecordingObserver()
    subscription = _subscription(asset_tree, ["src/*.scss", "img/**/*.png"], observer=observer)

    subscription.start()
    subscription.stop()

    assert sorted(observer.scheduled) == [(asset_tree.path("img"), True), (asset_tree.path("src"), True)]
    assert observer.running is False


def test_start_without_existing_directories_fails(asset_tree) -> None:
    subscription = _subscription(asset_tree, ["missing/**"], observer=RecordingObserver())

    with pytest.raises(FileAccessError):
        subscription.start()
