"""Admission policy for filesystem entries."""

from __future__ import annotations

import re

from crawlindex.config import CrawlConfig
from crawlindex.models import FileEntry


class PathClassifier:
    """Decide whether an entry is indexed (files) or descended into (directories).

    Files pass when their extension is allowed OR their whole name matches the
    optional name regex. Directories pass unless their path contains one of the
    excluded substrings anywhere, which is a coarse match: ``target`` also
    excludes ``/work/targeted/``. Anything else is rejected.
    """

    def __init__(self, config: CrawlConfig) -> None:
        self.allowed_extensions = config.allowed_extensions
        self.exclude_dir_substrings = config.exclude_dir_substrings
        self.name_pattern = (
            re.compile(config.allowed_name_regex) if config.allowed_name_regex is not None else None
        )

    def admitted(self, entry: FileEntry) -> bool:
        if entry.is_file:
            if entry.ext in self.allowed_extensions:
                return True
            return self.name_pattern is not None and self.name_pattern.fullmatch(entry.name) is not None
        if entry.is_dir:
            for token in self.exclude_dir_substrings:
                if token in entry.path:
                    return False
            return True
        return False
