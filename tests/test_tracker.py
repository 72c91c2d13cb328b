"""Tests for TaskTracker."""

from __future__ import annotations

import threading
import time
from concurrent.futures import ThreadPoolExecutor

import pytest

from crawlindex.crawl.tracker import DrainResult, TaskTracker
from crawlindex.models import EntryKind, FileEntry, TaskStatus


def _entry(name: str) -> FileEntry:
    return FileEntry.create(f"/virtual/{name}", EntryKind.FILE)


@pytest.fixture
def executor():
    pool = ThreadPoolExecutor(max_workers=8)
    yield pool
    pool.shutdown(wait=True)


def _wait_until(predicate, timeout: float = 5.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestSubmit:
    """Test task registration."""

    def test_task_registered_before_it_runs(self, executor) -> None:
        tracker = TaskTracker(executor)
        release = threading.Event()
        seen_sizes = []

        def work(entry: FileEntry) -> None:
            seen_sizes.append(len(tracker))
            release.wait(5.0)

        task = tracker.submit(_entry("a"), work)
        assert len(tracker) == 1
        release.set()
        tracker.drain(poll_interval=0.01)

        assert seen_sizes == [1]
        assert task.status is TaskStatus.DONE

    def test_failed_work_marks_task_failed(self, executor) -> None:
        tracker = TaskTracker(executor)

        def boom(entry: FileEntry) -> None:
            raise RuntimeError("disk on fire")

        task = tracker.submit(_entry("a"), boom)
        result = tracker.drain(poll_interval=0.01)

        assert task.status is TaskStatus.FAILED
        assert result == DrainResult(completed=1, failed=1)

    def test_submit_after_shutdown_fails_task(self) -> None:
        pool = ThreadPoolExecutor(max_workers=1)
        pool.shutdown(wait=True)
        tracker = TaskTracker(pool)

        task = tracker.submit(_entry("late"), lambda entry: None)

        assert task.status is TaskStatus.FAILED
        assert tracker.drain(poll_interval=0.01) == DrainResult(completed=1, failed=1)
        assert len(tracker) == 0


class TestDrain:
    """Test the rotating drain loop."""

    def test_drain_empty_tracker(self, executor) -> None:
        assert TaskTracker(executor).drain() == DrainResult()

    def test_drains_dynamically_discovered_tasks(self, executor) -> None:
        """Tasks that submit more tasks are fully drained."""
        tracker = TaskTracker(executor)
        visited = []
        lock = threading.Lock()

        def expand(entry: FileEntry) -> None:
            depth = entry.name.count("x")
            with lock:
                visited.append(entry.name)
            if depth < 4:
                for i in range(3):
                    tracker.submit(_entry(entry.name + "x" + str(i)), expand)

        tracker.submit(_entry("root"), expand)
        result = tracker.drain(poll_interval=0.01)

        expected = 1 + 3 + 9 + 27 + 81
        assert result.completed == expected
        assert result.failed == 0
        assert len(visited) == expected
        assert len(tracker) == 0

    def test_slow_task_does_not_block_others(self, executor) -> None:
        """Finished tasks behind a slow one are collected while it runs."""
        tracker = TaskTracker(executor)
        release = threading.Event()

        tracker.submit(_entry("slow"), lambda entry: release.wait(10.0))
        for i in range(5):
            tracker.submit(_entry(f"fast{i}"), lambda entry: None)

        results = []
        drainer = threading.Thread(target=lambda: results.append(tracker.drain(poll_interval=0.01)))
        drainer.start()

        assert _wait_until(lambda: len(tracker) <= 1)
        assert drainer.is_alive()

        release.set()
        drainer.join(timeout=10.0)

        assert not drainer.is_alive()
        assert results == [DrainResult(completed=6, failed=0)]

    def test_failures_do_not_stop_drain(self, executor) -> None:
        tracker = TaskTracker(executor)

        def maybe_fail(entry: FileEntry) -> None:
            if entry.name.startswith("bad"):
                raise OSError("nope")

        for i in range(4):
            tracker.submit(_entry(f"bad{i}"), maybe_fail)
            tracker.submit(_entry(f"good{i}"), maybe_fail)

        result = tracker.drain(poll_interval=0.01)

        assert result == DrainResult(completed=8, failed=4)
        assert len(tracker) == 0
