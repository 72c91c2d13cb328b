"""Exceptions raised across crawlindex."""

from __future__ import annotations


class CrawlIndexError(Exception):
    """Base class for crawlindex errors."""


class ExtractionFailure(CrawlIndexError):
    """Reading a file's text failed; the file is skipped."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"{path}: {reason}")
        self.path = path
        self.reason = reason


class WriteError(CrawlIndexError):
    """The index store rejected a write or commit."""


class QueryError(CrawlIndexError):
    """A query could not be parsed or targets an unknown field."""


class IndexOpenError(CrawlIndexError):
    """The index store could not be opened."""
