"""Command line interface for crawlindex."""

from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.table import Table

from crawlindex.config import AppConfig, CrawlConfig
from crawlindex.console import QueryConsole
from crawlindex.errors import CrawlIndexError, IndexOpenError
from crawlindex.index.indexer import Indexer
from crawlindex.index.search import Searcher
from crawlindex.index.storage import CONTENT_FIELD, SQLiteFullTextStore


console = Console()
app = typer.Typer(help="crawlindex - concurrent file crawler with full-text search")


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")


def _resolve_db(db: Optional[Path]) -> Path:
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path)
    return config.resolve_db_path(Path.cwd())


def _open_store(db_path: Path) -> SQLiteFullTextStore:
    try:
        return SQLiteFullTextStore.open(db_path)
    except IndexOpenError as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(code=1) from exc


@app.command()
def index(
    root: Path = typer.Argument(..., help="Directory to crawl.", resolve_path=True),
    db: Path = typer.Option(None, "--db", help="SQLite index path"),
    ext: Optional[List[str]] = typer.Option(
        None, "--ext", help="Allowed file extension, e.g. .java (repeatable)"
    ),
    exclude: Optional[List[str]] = typer.Option(
        None, "--exclude", help="Skip directories whose path contains this text (repeatable)"
    ),
    name_regex: Optional[str] = typer.Option(
        None, "--name-regex", help="Also index files whose name matches this regex"
    ),
    limit: int = typer.Option(CrawlConfig().content_limit, help="Max characters kept per file"),
    workers: int = typer.Option(CrawlConfig().workers, help="Crawler thread count"),
    fresh: bool = typer.Option(False, "--fresh", help="Delete all documents before indexing"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Recursively index the files under ROOT."""
    _setup_logging(verbose)
    if not root.is_dir():
        raise typer.BadParameter(f"Not a directory: {root}")

    try:
        crawl_config = CrawlConfig.from_options(
            extensions=ext,
            excludes=exclude,
            name_regex=name_regex,
            content_limit=limit,
            workers=workers,
        )
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    resolved_db = _resolve_db(db)
    console.print(f"Indexing into [bold]{resolved_db}[/bold]...")
    with _open_store(resolved_db) as store, Indexer(store, crawl_config) as indexer:
        try:
            if fresh:
                indexer.delete_all()
            stats = indexer.index(root)
        except CrawlIndexError as exc:
            console.print(f"[red]Indexing failed: {exc}[/red]")
            raise typer.Exit(code=1) from exc

    console.print(
        f"Indexed: {stats.indexed}, directories: {stats.directories}, "
        f"skipped: {stats.skipped}, failed: {stats.failed + stats.write_errors} "
        f"({stats.elapsed:.1f}s)"
    )


@app.command()
def delete(
    db: Path = typer.Option(None, "--db", help="SQLite index path"),
) -> None:
    """Delete every indexed document."""
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Database not found, nothing to delete.[/yellow]")
        return

    with _open_store(resolved_db) as store:
        store.delete_all()
        store.commit()
    console.print("Deleted all documents.")


@app.command()
def search(
    query: str = typer.Argument(..., help="Query text"),
    db: Path = typer.Option(None, "--db", help="SQLite index path"),
    field: str = typer.Option(CONTENT_FIELD, help="Field to query: content, name, path or ext"),
    rows: int = typer.Option(AppConfig().rows, help="Number of results to display"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Run a single full-text query."""
    _setup_logging(verbose)
    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        raise typer.BadParameter(f"Database not found: {resolved_db}")

    with _open_store(resolved_db) as store:
        try:
            results = Searcher(store).search(query, field=field, rows=rows)
        except CrawlIndexError as exc:
            console.print(f"[red]ERROR | {exc}[/red]")
            raise typer.Exit(code=2) from exc

    if not results:
        console.print("[yellow]No matches found.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("#")
    table.add_column("Score")
    table.add_column("Path", overflow="fold")
    for position, result in enumerate(results, start=1):
        table.add_row(f"{position:02d}", f"{result.score:.4f}", str(result.path))
    console.print(table)


@app.command()
def shell(
    db: Path = typer.Option(None, "--db", help="SQLite index path"),
    root: Path = typer.Option(None, "--root", help="Default directory for -index"),
    rows: int = typer.Option(AppConfig().rows, help="Initial number of results per query"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Verbose logging"),
) -> None:
    """Interactive loop: -index [path], -delete, -rows N, -quit, or a query."""
    _setup_logging(verbose)
    config = AppConfig(db_path=db if db is not None else AppConfig().db_path, rows=rows)
    if root is not None:
        config.default_root = root
    resolved_db = config.resolve_db_path(Path.cwd())

    with _open_store(resolved_db) as store, Indexer(store, config.crawl) as indexer:
        loop = QueryConsole(
            indexer,
            Searcher(store),
            default_root=config.default_root,
            rows=config.rows,
            console=console,
        )
        loop.run(sys.stdin)


@app.command()
def web(
    host: str = typer.Option("127.0.0.1", help="Host interface"),
    port: int = typer.Option(8000, help="Server port"),
    db: Path = typer.Option(None, "--db", help="SQLite index path"),
) -> None:
    """Start the web API."""
    try:
        import uvicorn
    except ImportError as exc:  # pragma: no cover - optional extra
        raise typer.BadParameter(
            "uvicorn is not installed. Install the web extras with \"python -m pip install '.[web]'\""
        ) from exc

    from crawlindex.web.app import app as web_app

    resolved_db = _resolve_db(db)
    if not resolved_db.exists():
        console.print("[yellow]Warning: database not found, searches might fail.[/yellow]")

    web_app.state.db_path = resolved_db
    console.print(f"Starting web API on http://{host}:{port} (database: {resolved_db})")
    uvicorn.run(web_app, host=host, port=port, reload=False, log_level="info")
