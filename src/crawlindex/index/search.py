"""Query interface over the full-text store."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List

from crawlindex.index.storage import CONTENT_FIELD, SQLiteFullTextStore


@dataclass(slots=True)
class SearchResult:
    path: Path
    score: float


class Searcher:
    """High-level API to query the full-text store."""

    def __init__(self, store: SQLiteFullTextStore) -> None:
        self.store = store

    def search(self, query: str, *, field: str = CONTENT_FIELD, rows: int = 30) -> List[SearchResult]:
        """Run ``query`` against ``field``; raises ``QueryError`` on bad syntax."""
        return [
            SearchResult(path=Path(path), score=score)
            for path, score in self.store.search(query.strip(), field, rows)
        ]
