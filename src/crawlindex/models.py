"""Core crawlindex data models."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class EntryKind(str, Enum):
    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"


class TaskStatus(str, Enum):
    PENDING = "pending"
    DONE = "done"
    FAILED = "failed"


def extension_of(name: str) -> str:
    """Return the lower-cased extension of ``name`` including the dot, or ``""``."""
    dot = name.rfind(".")
    return name[dot:].lower() if dot >= 0 else ""


@dataclass(frozen=True, slots=True)
class FileEntry:
    """One filesystem node seen during a crawl."""

    path: str
    name: str
    ext: str
    last_modified: int
    kind: EntryKind

    @classmethod
    def create(cls, path: str | Path, kind: EntryKind, last_modified: int = 0) -> FileEntry:
        path = str(path)
        name = Path(path).name
        return cls(
            path=path,
            name=name,
            ext=extension_of(name),
            last_modified=last_modified,
            kind=kind,
        )

    @property
    def is_file(self) -> bool:
        return self.kind is EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind is EntryKind.DIRECTORY


@dataclass(frozen=True, slots=True)
class IndexDocument:
    """Unit of work handed to the index store, keyed by ``path``."""

    name: str
    path: str
    ext: str
    last_modified: int
    content: str


@dataclass(slots=True, eq=False)
class CrawlTask:
    """Process the subtree rooted at ``entry``.

    Owned by :class:`~crawlindex.crawl.tracker.TaskTracker` from registration
    until the drain loop observes it complete.
    """

    entry: FileEntry
    status: TaskStatus = TaskStatus.PENDING
    _finished: threading.Event = field(default_factory=threading.Event, repr=False)

    def finish(self, status: TaskStatus) -> None:
        self.status = status
        self._finished.set()

    def done(self) -> bool:
        return self._finished.is_set()

    def wait(self, timeout: float) -> bool:
        """Block up to ``timeout`` seconds; return whether the task completed."""
        return self._finished.wait(timeout)
