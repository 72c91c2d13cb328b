"""Recursive, concurrent directory crawl feeding the index store."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol

from crawlindex.config import CrawlConfig
from crawlindex.crawl.classifier import PathClassifier
from crawlindex.crawl.tracker import DrainResult, TaskTracker
from crawlindex.errors import ExtractionFailure, WriteError
from crawlindex.ingestion.text_loader import DocumentBuilder
from crawlindex.models import FileEntry, IndexDocument
from crawlindex.utils.files import entry_for, list_children

LOGGER = logging.getLogger(__name__)


class DocumentSink(Protocol):
    def add_or_update(self, document: IndexDocument) -> int: ...


@dataclass(slots=True)
class CrawlStats:
    directories: int = 0
    indexed: int = 0
    skipped: int = 0
    failed: int = 0
    write_errors: int = 0
    elapsed: float = 0.0
    indexed_paths: list[str] = field(default_factory=list)
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def increment(self, status: str, path: str | None = None) -> None:
        with self._lock:
            if status == "directory":
                self.directories += 1
            elif status == "indexed":
                self.indexed += 1
                if path is not None:
                    self.indexed_paths.append(path)
            elif status == "skipped":
                self.skipped += 1
            elif status == "write_error":
                self.write_errors += 1
            else:
                self.failed += 1


class Crawler:
    """Walks a tree with one pool task per entry and upserts admitted files.

    Directory tasks list their children, submit one task each and return
    without waiting. Failures stay inside the task that hit them. Call
    :meth:`drain` before committing the sink.
    """

    def __init__(self, sink: DocumentSink, config: CrawlConfig | None = None) -> None:
        self.sink = sink
        self.config = config or CrawlConfig()
        self.classifier = PathClassifier(self.config)
        self.builder = DocumentBuilder(self.config.content_limit, self.config.encoding)
        self._pool = ThreadPoolExecutor(
            max_workers=self.config.workers, thread_name_prefix="crawlindex"
        )
        self.tracker = TaskTracker(self._pool)
        self.stats = CrawlStats()

    def __enter__(self) -> Crawler:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Stop accepting tasks; tasks already running are left to finish."""
        self._pool.shutdown(wait=True)
        LOGGER.debug("Crawler pool shut down")

    def crawl(self, root: str | Path) -> CrawlStats:
        """Submit ``root``; returns the live stats object, complete after :meth:`drain`."""
        self.stats = CrawlStats()
        # a symlinked root is still crawled; links below it are not followed
        self.submit(entry_for(root, follow_dir_links=True))
        return self.stats

    def submit(self, entry: FileEntry) -> None:
        self.tracker.submit(entry, self._process)

    def drain(self) -> DrainResult:
        return self.tracker.drain(self.config.poll_interval)

    def _process(self, entry: FileEntry) -> None:
        if not self.classifier.admitted(entry):
            LOGGER.debug("[SKIP] -- %s", entry.path)
            self.stats.increment("skipped")
            return

        if entry.is_dir:
            self._expand(entry)
        else:
            self._index_file(entry)

    def _expand(self, entry: FileEntry) -> None:
        LOGGER.debug("[INDEX_DIR] -- %s", entry.path)
        try:
            children = list_children(entry.path)
        except OSError as exc:
            LOGGER.warning("Cannot list %s: %s", entry.path, exc)
            self.stats.increment("failed")
            return

        self.stats.increment("directory")
        for child in children:
            self.submit(child)

    def _index_file(self, entry: FileEntry) -> None:
        try:
            document = self.builder.build(entry)
        except ExtractionFailure as exc:
            LOGGER.warning("Skipping %s: %s", entry.path, exc.reason)
            self.stats.increment("failed")
            return

        try:
            seq = self.sink.add_or_update(document)
        except WriteError as exc:
            LOGGER.error("[INDEX] %s -- %s", entry.path, exc)
            self.stats.increment("write_error")
            return

        LOGGER.debug("[INDEX_FILE] -- %s (seq %d)", entry.path, seq)
        self.stats.increment("indexed", entry.path)
