"""Shared fixtures."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Dict, List

import pytest

from crawlindex.config import CrawlConfig
from crawlindex.errors import WriteError
from crawlindex.index.storage import SQLiteFullTextStore
from crawlindex.models import IndexDocument


class RecordingSink:
    """Thread-safe stand-in for the index store that remembers every call."""

    def __init__(self, fail_paths: set[str] | None = None) -> None:
        self.documents: List[IndexDocument] = []
        self.events: List[str] = []
        self.fail_paths = fail_paths or set()
        self._lock = threading.Lock()

    def add_or_update(self, document: IndexDocument) -> int:
        with self._lock:
            if document.path in self.fail_paths:
                raise WriteError(f"rejected {document.path}")
            self.documents.append(document)
            self.events.append("add")
            return len(self.events)

    def commit(self) -> int:
        with self._lock:
            self.events.append("commit")
            return len(self.events)

    @property
    def paths(self) -> List[str]:
        return sorted(doc.path for doc in self.documents)


def write_tree(root: Path, files: Dict[str, str]) -> Path:
    """Create ``files`` (relative path -> text) under ``root``."""
    for relative, text in files.items():
        target_file = root / relative
        target_file.parent.mkdir(parents=True, exist_ok=True)
        target_file.write_text(text)
    return root


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def memory_store():
    store = SQLiteFullTextStore.open(":memory:")
    yield store
    store.close()


@pytest.fixture
def crawl_config() -> CrawlConfig:
    return CrawlConfig(
        allowed_extensions=frozenset({".java", ".yml"}),
        exclude_dir_substrings=(".git", "build-output"),
        workers=8,
        poll_interval=0.01,
    )
