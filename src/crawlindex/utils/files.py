"""Utility helpers for working with the filesystem."""

from __future__ import annotations

import os
import stat
from pathlib import Path
from typing import Iterator

from crawlindex.models import EntryKind, FileEntry


def _kind_of(mode: int) -> EntryKind:
    if stat.S_ISREG(mode):
        return EntryKind.FILE
    if stat.S_ISDIR(mode):
        return EntryKind.DIRECTORY
    return EntryKind.OTHER


def entry_for(path: str | Path, *, follow_dir_links: bool = False) -> FileEntry:
    """Build a :class:`FileEntry` from the current state of ``path``.

    Symlinks to files are followed. Symlinked directories are reported as
    ``OTHER`` unless ``follow_dir_links`` is set, so a crawl never loops
    through a link cycle. Entries that cannot be stat'ed (vanished, dangling
    links) are ``OTHER`` with a zero timestamp.
    """
    try:
        st = os.stat(path)
    except OSError:
        return FileEntry.create(path, EntryKind.OTHER)

    kind = _kind_of(st.st_mode)
    if kind is EntryKind.DIRECTORY and not follow_dir_links and os.path.islink(path):
        kind = EntryKind.OTHER
    return FileEntry.create(path, kind, last_modified=st.st_mtime_ns // 1_000_000)


def list_children(path: str | Path) -> list[FileEntry]:
    """Return entries for the immediate children of a directory.

    Raises ``OSError`` when the directory cannot be listed.
    """
    with os.scandir(path) as it:
        return [entry_for(child.path) for child in it]


def iter_lines(path: str | Path, encoding: str | None = None) -> Iterator[str]:
    """Yield the lines of a text file lazily, without line terminators.

    ``encoding=None`` uses the platform default text encoding.
    """
    with open(path, "r", encoding=encoding) as handle:
        for line in handle:
            yield line.rstrip("\n")
