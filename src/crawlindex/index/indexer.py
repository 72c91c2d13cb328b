"""Document indexing pipeline."""

from __future__ import annotations

import logging
import time
from pathlib import Path

from crawlindex.config import CrawlConfig
from crawlindex.crawl.crawler import Crawler, CrawlStats
from crawlindex.index.storage import SQLiteFullTextStore

LOGGER = logging.getLogger(__name__)


class Indexer:
    """Coordinates crawl, drain and the single commit that follows."""

    def __init__(self, store: SQLiteFullTextStore, config: CrawlConfig | None = None) -> None:
        self.store = store
        self.config = config or CrawlConfig()
        self._crawler: Crawler | None = None

    @property
    def crawler(self) -> Crawler:
        if self._crawler is None:
            self._crawler = Crawler(self.store, self.config)
        return self._crawler

    def close(self) -> None:
        if self._crawler is not None:
            self._crawler.close()
            self._crawler = None

    def __enter__(self) -> Indexer:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def index(self, root: Path | str) -> CrawlStats:
        """Index everything admitted under ``root`` and commit once."""
        root = Path(root)
        if not root.exists():
            raise FileNotFoundError(f"Crawl root not found: {root}")

        LOGGER.info("Indexing %s", root)
        started = time.monotonic()
        crawler = self.crawler
        stats = crawler.crawl(root.absolute())
        drained = crawler.drain()
        seq = self.store.commit()
        stats.elapsed = time.monotonic() - started

        LOGGER.info(
            "Indexed %d files in %.1f seconds (%d tasks, %d failed, commit %d)",
            stats.indexed,
            stats.elapsed,
            drained.completed,
            drained.failed,
            seq,
        )
        return stats

    def delete_all(self) -> int:
        """Remove every document from the store and commit."""
        LOGGER.info("Deleting all documents")
        self.store.delete_all()
        return self.store.commit()
