"""FastAPI application exposing search and indexing over HTTP."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Any, List

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from crawlindex.config import AppConfig
from crawlindex.errors import CrawlIndexError, IndexOpenError, QueryError
from crawlindex.index.indexer import Indexer
from crawlindex.index.search import Searcher
from crawlindex.index.storage import CONTENT_FIELD, SQLiteFullTextStore

LOGGER = logging.getLogger(__name__)

MAX_ROWS = 200

app = FastAPI(title="crawlindex", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)
app.state.db_path = None


class SearchPayload(BaseModel):
    query: str
    field: str = CONTENT_FIELD
    rows: int = 30
    db: Path | None = None


class SearchHit(BaseModel):
    path: str
    score: float


class IndexPayload(BaseModel):
    path: str
    db: Path | None = None
    fresh: bool = False


class DeletePayload(BaseModel):
    db: Path | None = None


def _resolve_db_path(db: Path | None) -> Path:
    if db is None:
        db = app.state.db_path
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _open_store(resolved_db: Path) -> SQLiteFullTextStore:
    try:
        return SQLiteFullTextStore.open(resolved_db)
    except IndexOpenError as exc:
        raise HTTPException(status_code=500, detail=str(exc)) from exc


def _open_existing(db: Path | None) -> SQLiteFullTextStore:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        raise HTTPException(
            status_code=404,
            detail=f"Database not found at {resolved_db}. Index a directory first.",
        )
    return _open_store(resolved_db)


@app.on_event("startup")
async def startup_event() -> None:
    logging.basicConfig(level=logging.INFO, format="[%(levelname)s] %(message)s")


@app.post("/search")
async def search_documents(payload: SearchPayload) -> dict[str, List[SearchHit]]:
    query = payload.query.strip()
    if not query:
        raise HTTPException(status_code=400, detail="Empty query")

    rows = max(1, min(payload.rows, MAX_ROWS))
    with _open_existing(payload.db) as store:
        try:
            results = Searcher(store).search(query, field=payload.field, rows=rows)
        except QueryError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    return {"results": [SearchHit(path=str(r.path), score=r.score) for r in results]}


@app.get("/documents/count")
async def count_documents(db: Path | None = None) -> dict[str, int]:
    resolved_db = _resolve_db_path(db)
    if not resolved_db.exists():
        return {"count": 0}
    with _open_store(resolved_db) as store:
        return {"count": store.count()}


@app.post("/delete")
async def delete_documents(payload: DeletePayload) -> dict[str, str]:
    with _open_existing(payload.db) as store:
        store.delete_all()
        store.commit()
    return {"status": "ok"}


def _run_index_job(root: Path, resolved_db: Path, fresh: bool) -> dict[str, Any]:
    with SQLiteFullTextStore.open(resolved_db) as store, Indexer(store) as indexer:
        if fresh:
            indexer.delete_all()
        stats = indexer.index(root)

    return {
        "indexed": stats.indexed,
        "directories": stats.directories,
        "skipped": stats.skipped,
        "failed": stats.failed,
        "write_errors": stats.write_errors,
        "elapsed": stats.elapsed,
    }


@app.post("/index")
async def index_directory(payload: IndexPayload) -> dict[str, Any]:
    clean_path = payload.path.strip().replace("\r", "").replace("\n", "")
    if not clean_path:
        raise HTTPException(status_code=400, detail="No path provided")
    if "\0" in clean_path:
        raise HTTPException(status_code=400, detail="Invalid path: contains null byte")

    root = Path(clean_path).expanduser()
    if not root.exists():
        raise HTTPException(status_code=404, detail=f"Path not found: {clean_path}")
    if not root.is_dir():
        raise HTTPException(status_code=400, detail=f"Path must be a directory: {clean_path}")

    resolved_db = _resolve_db_path(payload.db)
    try:
        stats = await asyncio.to_thread(_run_index_job, root.resolve(), resolved_db, payload.fresh)
    except CrawlIndexError as exc:
        LOGGER.exception("Indexing failed: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return {"status": "ok", "db": str(resolved_db), "stats": stats}
