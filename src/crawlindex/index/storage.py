"""SQLite FTS5 full-text store."""

from __future__ import annotations

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple

from crawlindex.errors import IndexOpenError, QueryError, WriteError
from crawlindex.models import IndexDocument

LOGGER = logging.getLogger(__name__)

MEMORY = ":memory:"
EXACT_FIELDS = ("name", "path", "ext")
CONTENT_FIELD = "content"


class SQLiteFullTextStore:
    """Persistence layer for indexed documents.

    Writes from any thread are serialized on an internal lock and stay
    pending until :meth:`commit`. ``path`` is the document identity, so
    :meth:`add_or_update` replaces any earlier document with the same path.
    """

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = db_path if db_path == MEMORY else Path(db_path)
        self._lock = threading.RLock()
        self._seq = 0
        self._conn = sqlite3.connect(str(self.db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        if self.db_path != MEMORY:
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute("PRAGMA synchronous=NORMAL;")
        self._ensure_schema()

    @classmethod
    def open(cls, location: Path | str) -> SQLiteFullTextStore:
        """Open (creating if needed) the store at ``location`` or in memory."""
        try:
            if location != MEMORY:
                Path(location).parent.mkdir(parents=True, exist_ok=True)
            return cls(location)
        except (OSError, sqlite3.Error) as exc:
            raise IndexOpenError(f"Cannot open index at {location}: {exc}") from exc

    @property
    def connection(self) -> sqlite3.Connection:
        return self._conn

    def __enter__(self) -> SQLiteFullTextStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        with self._lock:
            self._conn.close()

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        with self._lock:
            try:
                yield self._conn
                self._conn.commit()
            except Exception:
                self._conn.rollback()
                raise

    def _ensure_schema(self) -> None:
        with self.transaction() as conn:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS documents (
                    id INTEGER PRIMARY KEY,
                    path TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    ext TEXT NOT NULL,
                    last_modified INTEGER NOT NULL
                )
                """
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_name ON documents(name)"
            )
            conn.execute(
                "CREATE INDEX IF NOT EXISTS idx_documents_ext ON documents(ext)"
            )
            conn.execute(
                """CREATE INDEX IF NOT EXISTS idx_documents_last_modified
                    ON documents(last_modified)
                """
            )
            conn.execute(
                "CREATE VIRTUAL TABLE IF NOT EXISTS documents_fts USING fts5(content)"
            )

    def _next_seq(self) -> int:
        self._seq += 1
        return self._seq

    def add_or_update(self, document: IndexDocument) -> int:
        """Insert ``document`` or replace the one stored under the same path."""
        with self._lock:
            # the savepoint must nest inside the pending transaction, or
            # RELEASE would commit it
            if not self._conn.in_transaction:
                self._conn.execute("BEGIN")
            self._conn.execute("SAVEPOINT upsert")
            try:
                existing = self._conn.execute(
                    "SELECT id FROM documents WHERE path = ?", (document.path,)
                ).fetchone()
                if existing:
                    doc_id = existing["id"]
                    self._conn.execute(
                        "UPDATE documents SET name = ?, ext = ?, last_modified = ? WHERE id = ?",
                        (document.name, document.ext, document.last_modified, doc_id),
                    )
                    self._conn.execute("DELETE FROM documents_fts WHERE rowid = ?", (doc_id,))
                else:
                    doc_id = self._conn.execute(
                        """
                        INSERT INTO documents(path, name, ext, last_modified)
                        VALUES (?, ?, ?, ?)
                        """,
                        (document.path, document.name, document.ext, document.last_modified),
                    ).lastrowid
                self._conn.execute(
                    "INSERT INTO documents_fts(rowid, content) VALUES (?, ?)",
                    (doc_id, document.content),
                )
            except sqlite3.Error as exc:
                self._conn.execute("ROLLBACK TO upsert")
                self._conn.execute("RELEASE upsert")
                raise WriteError(f"Cannot index {document.path}: {exc}") from exc
            self._conn.execute("RELEASE upsert")
            return self._next_seq()

    def delete_all(self) -> int:
        """Remove every document. The caller is expected to :meth:`commit`."""
        with self._lock:
            try:
                self._conn.execute("DELETE FROM documents_fts")
                self._conn.execute("DELETE FROM documents")
            except sqlite3.Error as exc:
                raise WriteError(f"Cannot delete documents: {exc}") from exc
            seq = self._next_seq()
        LOGGER.debug("[DELETE_ALL] -- %d", seq)
        return seq

    def commit(self) -> int:
        with self._lock:
            try:
                self._conn.commit()
            except sqlite3.Error as exc:
                raise WriteError(f"Commit failed: {exc}") from exc
            seq = self._next_seq()
        LOGGER.debug("[COMMIT] -- %d", seq)
        return seq

    def count(self) -> int:
        with self._lock:
            return self._conn.execute("SELECT COUNT(*) FROM documents").fetchone()[0]

    def search(
        self, query_text: str, field: str = CONTENT_FIELD, max_rows: int = 30
    ) -> List[Tuple[str, float]]:
        """Return up to ``max_rows`` ``(path, score)`` pairs, best first.

        ``content`` takes FTS5 query syntax; ``name``, ``path`` and ``ext``
        are matched exactly.
        """
        if max_rows <= 0:
            return []

        if field == CONTENT_FIELD:
            sql = """
                SELECT d.path AS path, hits.score AS score
                FROM (
                    SELECT rowid, -bm25(documents_fts) AS score
                    FROM documents_fts
                    WHERE documents_fts MATCH ?
                    ORDER BY score DESC
                    LIMIT ?
                ) AS hits
                JOIN documents d ON d.id = hits.rowid
                ORDER BY hits.score DESC, d.path
            """
        elif field in EXACT_FIELDS:
            sql = f"""
                SELECT path, 1.0 AS score
                FROM documents
                WHERE {field} = ?
                ORDER BY path
                LIMIT ?
            """
        else:
            raise QueryError(f"Unknown field: {field}")

        with self._lock:
            try:
                rows = self._conn.execute(sql, (query_text, max_rows)).fetchall()
            except sqlite3.OperationalError as exc:
                raise QueryError(f"Invalid query {query_text!r}: {exc}") from exc
        return [(row["path"], float(row["score"])) for row in rows]

    def modified_between(
        self, start_ms: int, end_ms: int, max_rows: int = 30
    ) -> List[Tuple[str, int]]:
        """Return ``(path, last_modified)`` for documents modified in the inclusive range."""
        if max_rows <= 0:
            return []
        with self._lock:
            rows = self._conn.execute(
                """
                SELECT path, last_modified FROM documents
                WHERE last_modified BETWEEN ? AND ?
                ORDER BY last_modified DESC, path
                LIMIT ?
                """,
                (start_ms, end_ms, max_rows),
            ).fetchall()
        return [(row["path"], row["last_modified"]) for row in rows]
