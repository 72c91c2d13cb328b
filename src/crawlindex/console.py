"""Interactive query loop.

Lines starting with ``-`` are directives, everything else is a query
against the ``content`` field::

    -index [path]   crawl ``path`` (or the default root) and commit
    -delete         delete every document and commit
    -rows N         show at most N results per query
    -quit           leave the loop
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable

from rich.console import Console

from crawlindex.errors import CrawlIndexError
from crawlindex.index.indexer import Indexer
from crawlindex.index.search import Searcher

LOGGER = logging.getLogger(__name__)


class QueryConsole:
    def __init__(
        self,
        indexer: Indexer,
        searcher: Searcher,
        *,
        default_root: Path,
        rows: int = 30,
        console: Console | None = None,
    ) -> None:
        self.indexer = indexer
        self.searcher = searcher
        self.default_root = default_root
        self.rows = rows
        self.console = console or Console()

    def _emit(self, text: str) -> None:
        self.console.print(text, markup=False, highlight=False, soft_wrap=True)

    def run(self, lines: Iterable[str]) -> None:
        self._emit(">> START QUERYING HERE <<")
        for raw in lines:
            line = raw.strip()
            if not line:
                continue
            self._emit(f"[{line}]")
            if line.startswith("-"):
                if not self.handle_directives(line.split()):
                    return
                continue
            self.query(line)

    def handle_directives(self, tokens: list[str]) -> bool:
        """Apply every directive in ``tokens``; return ``False`` on ``-quit``."""
        i = 0
        while i < len(tokens):
            token = tokens[i].lower()
            if token == "-index":
                root = self.default_root
                if i + 1 < len(tokens) and not tokens[i + 1].startswith("-"):
                    i += 1
                    candidate = Path(tokens[i])
                    if candidate.exists():
                        root = candidate
                self.index(root)
            elif token == "-delete":
                self.delete()
            elif token == "-rows":
                if i + 1 < len(tokens):
                    i += 1
                    try:
                        self.rows = int(tokens[i])
                    except ValueError:
                        self._emit(f"ERROR | invalid row count: {tokens[i]}")
            elif token == "-quit":
                return False
            else:
                self._emit(f"ERROR | unknown directive: {tokens[i]}")
            i += 1
        return True

    def index(self, root: Path) -> None:
        self._emit(f"INDEXING | {root}")
        try:
            stats = self.indexer.index(root)
        except (CrawlIndexError, OSError) as exc:
            self._emit(f"ERROR | {exc}")
            return
        self._emit(f"INDEXED | {stats.indexed} files, {stats.failed} failed, {stats.elapsed:.1f}s")

    def delete(self) -> None:
        try:
            self.indexer.delete_all()
        except CrawlIndexError as exc:
            self._emit(f"ERROR | {exc}")
            return
        self._emit("DELETED | all documents")

    def query(self, text: str) -> None:
        try:
            results = self.searcher.search(text, rows=self.rows)
        except CrawlIndexError as exc:
            self._emit(f"ERROR | {exc}")
            return
        if not results:
            self._emit("[NO RESULTS]")
            return
        for position, result in enumerate(results, start=1):
            self._emit(f"[{position:02d}] | {result.path}")
