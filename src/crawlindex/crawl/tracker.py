"""Registry of in-flight crawl tasks and the drain loop that empties it."""

from __future__ import annotations

import logging
import threading
from collections import deque
from concurrent.futures import Executor
from dataclasses import dataclass
from typing import Callable, Deque

from crawlindex.models import CrawlTask, FileEntry, TaskStatus

LOGGER = logging.getLogger(__name__)


@dataclass(slots=True)
class DrainResult:
    completed: int = 0
    failed: int = 0


class TaskTracker:
    """Tracks every submitted task until the drain loop sees it finish.

    The total number of tasks is unknown up front because directory tasks
    submit their children while running. A task is registered before it is
    handed to the executor, so a parent's children are always tracked before
    the parent can be observed done and an empty tracker means the crawl is
    complete.
    """

    def __init__(self, executor: Executor) -> None:
        self._executor = executor
        self._tasks: Deque[CrawlTask] = deque()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._tasks)

    def submit(self, entry: FileEntry, work: Callable[[FileEntry], object]) -> CrawlTask:
        """Register a task for ``entry`` and schedule ``work(entry)``."""
        task = CrawlTask(entry)
        with self._lock:
            self._tasks.append(task)
        try:
            self._executor.submit(self._run, task, work)
        except RuntimeError as exc:
            # executor already shut down; the drain loop still collects the task
            LOGGER.error("Cannot schedule %s: %s", entry.path, exc)
            task.finish(TaskStatus.FAILED)
        return task

    @staticmethod
    def _run(task: CrawlTask, work: Callable[[FileEntry], object]) -> None:
        status = TaskStatus.FAILED
        try:
            work(task.entry)
            status = TaskStatus.DONE
        except Exception:
            LOGGER.exception("Task for %s failed", task.entry.path)
        finally:
            task.finish(status)

    def drain(self, poll_interval: float = 0.1) -> DrainResult:
        """Block until every tracked task, including ones added meanwhile, is done.

        The oldest task is probed for at most ``poll_interval`` seconds; if it
        is still running it goes to the back of the queue and the next one is
        tried, so one slow task never holds up collecting the others.
        """
        result = DrainResult()
        while True:
            with self._lock:
                if not self._tasks:
                    break
                task = self._tasks.popleft()

            if not task.done() and not task.wait(poll_interval):
                with self._lock:
                    self._tasks.append(task)
                continue

            result.completed += 1
            if task.status is TaskStatus.FAILED:
                result.failed += 1

        LOGGER.debug("%d TASKS COMPLETED, %d FAILED", result.completed, result.failed)
        return result
