"""Plain-text extraction for indexable files."""

from __future__ import annotations

import logging
from contextlib import closing

from crawlindex.config import DEFAULT_CONTENT_LIMIT
from crawlindex.errors import ExtractionFailure
from crawlindex.models import FileEntry, IndexDocument
from crawlindex.utils.files import iter_lines
from crawlindex.utils.text import join_limited

LOGGER = logging.getLogger(__name__)


def read_content(path: str, limit: int, encoding: str | None = None) -> str:
    """Read at most ``limit`` characters of a text file, line by line.

    Raises :class:`ExtractionFailure` when the file cannot be opened or
    decoded. No retry is attempted.
    """
    if limit <= 0:
        return ""
    try:
        with closing(iter_lines(path, encoding)) as lines:
            return join_limited(lines, limit)
    except (OSError, UnicodeDecodeError) as exc:
        raise ExtractionFailure(path, str(exc)) from exc


class DocumentBuilder:
    """Turns an admitted file entry into an :class:`IndexDocument`."""

    def __init__(self, limit: int = DEFAULT_CONTENT_LIMIT, encoding: str | None = None) -> None:
        self.limit = limit
        self.encoding = encoding

    def build(self, entry: FileEntry) -> IndexDocument:
        content = read_content(entry.path, self.limit, self.encoding)
        if self.limit > 0 and len(content) == self.limit:
            LOGGER.debug("Content of %s capped at %d characters", entry.path, self.limit)
        return IndexDocument(
            name=entry.name,
            path=entry.path,
            ext=entry.ext,
            last_modified=entry.last_modified,
            content=content,
        )
