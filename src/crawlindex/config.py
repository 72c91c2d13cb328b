"""Application configuration defaults."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable

DEFAULT_EXTENSIONS = (".java", ".xml", ".yml", ".properties")
DEFAULT_EXCLUDES = ("artifactory", ".idea", "apache-ignite-src", "dbeaver", ".git", "target")
DEFAULT_CONTENT_LIMIT = 2097152  # 2 MiB of characters
DEFAULT_WORKERS = 64
DEFAULT_ROWS = 30


def _get_default_db_path() -> Path:
    """Get the default database path based on the execution context."""
    # When running from a checkout, prefer local data/ if it exists
    local_db = Path("data/crawlindex.db")
    if local_db.exists():
        return local_db

    return Path.home() / ".crawlindex" / "crawlindex.db"


def _normalise_extension(ext: str) -> str:
    ext = ext.strip().lower()
    if ext and not ext.startswith("."):
        ext = f".{ext}"
    return ext


@dataclass(frozen=True, slots=True)
class CrawlConfig:
    """Immutable filtering and extraction rules shared by every crawl task."""

    allowed_extensions: frozenset[str] = frozenset(DEFAULT_EXTENSIONS)
    allowed_name_regex: str | None = None
    exclude_dir_substrings: tuple[str, ...] = DEFAULT_EXCLUDES
    content_limit: int = DEFAULT_CONTENT_LIMIT
    encoding: str | None = None
    workers: int = DEFAULT_WORKERS
    poll_interval: float = 0.1

    def __post_init__(self) -> None:
        object.__setattr__(
            self,
            "allowed_extensions",
            frozenset(filter(None, map(_normalise_extension, self.allowed_extensions))),
        )
        object.__setattr__(self, "exclude_dir_substrings", tuple(self.exclude_dir_substrings))
        if self.allowed_name_regex is not None:
            try:
                re.compile(self.allowed_name_regex)
            except re.error as exc:
                raise ValueError(f"Invalid name regex {self.allowed_name_regex!r}: {exc}") from exc
        if self.workers < 1:
            raise ValueError("workers must be at least 1")
        if self.poll_interval <= 0:
            raise ValueError("poll_interval must be positive")

    @classmethod
    def from_options(
        cls,
        *,
        extensions: Iterable[str] | None = None,
        excludes: Iterable[str] | None = None,
        name_regex: str | None = None,
        content_limit: int | None = None,
        workers: int | None = None,
    ) -> CrawlConfig:
        """Build a config where ``None`` keeps the default for that option."""
        defaults = cls()
        return cls(
            allowed_extensions=frozenset(extensions) if extensions else defaults.allowed_extensions,
            allowed_name_regex=name_regex,
            exclude_dir_substrings=tuple(excludes) if excludes else defaults.exclude_dir_substrings,
            content_limit=content_limit if content_limit is not None else defaults.content_limit,
            workers=workers if workers is not None else defaults.workers,
        )


@dataclass(slots=True)
class AppConfig:
    db_path: Path | None = None
    rows: int = DEFAULT_ROWS
    default_root: Path = field(default_factory=Path.cwd)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)

    def __post_init__(self) -> None:
        if self.db_path is None:
            self.db_path = _get_default_db_path()

    def resolve_db_path(self, base_dir: Path | None = None) -> Path:
        if self.db_path is None:
            self.db_path = _get_default_db_path()
        if Path(self.db_path).is_absolute() or base_dir is None:
            return Path(self.db_path)
        return base_dir / self.db_path
