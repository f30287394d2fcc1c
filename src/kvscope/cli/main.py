"""CLI entry point."""

from collections.abc import Iterator
from contextlib import contextmanager
from typing import NoReturn, Optional

import typer
from rich.console import Console
from rich.table import Table

from kvscope.engine.inspector import KeyspaceInspector
from kvscope.engine.search import SearchMode
from kvscope.errors import KeyspaceError
from kvscope.log import configure_logging
from kvscope.settings import settings
from kvscope.store.database import open_store

app = typer.Typer(name="kvscope", help="Read-only key-space inspector", add_completion=False)
console = Console()


@app.callback()
def main(
    log_level: str = typer.Option(settings.log_level, "--log-level", help="Minimum log level"),
) -> None:
    """Read-only key-space inspector."""
    configure_logging(log_level)


@contextmanager
def open_inspector(db_path: str | None = None) -> Iterator[KeyspaceInspector]:
    """Inspector over the configured store, optionally at another path.

    The store is closed when the block exits, on errors too.
    """
    config = settings.model_copy(update={"db_path": db_path}) if db_path else settings
    store = open_store(config)
    try:
        yield KeyspaceInspector(store, config=config)
    finally:
        store.close()


def fail(error: KeyspaceError) -> NoReturn:
    console.print(f"[red]✗[/red] {error}")
    raise typer.Exit(code=1)


@app.command()
def serve(
    host: str = typer.Option(settings.api_host, help="API server host"),
    port: int = typer.Option(settings.api_port, help="API server port"),
    reload: bool = typer.Option(settings.api_reload, help="Auto-reload on code changes"),
) -> None:
    """Start the kvscope API server.

    Examples:
        kvscope serve
        kvscope serve --host 127.0.0.1 --port 9090
    """
    import uvicorn

    console.print(f"[green]Starting kvscope API server on {host}:{port}[/green]")
    console.print(f"[dim]Docs:[/dim] http://{host}:{port}/docs")
    uvicorn.run("kvscope.api.main:app", host=host, port=port, reload=reload)


@app.command()
def keys(
    table: str = typer.Argument(..., help="Table name, 'all' or 'internal'"),
    regex: Optional[str] = typer.Option(None, "--regex", "-r", help="Scan with a regular expression"),
    max_rows: int = typer.Option(settings.default_max_rows, "--max-rows", "-n", help="Row cap"),
    lookback: int = typer.Option(settings.default_lookback_hours, help="Lookback hours (partition search)"),
    match: str = typer.Option("", "--match", "-m", help="Key substring (partition search)"),
    db: Optional[str] = typer.Option(None, "--db", help="Database path override"),
    output_json: bool = typer.Option(False, "--json", help="Output raw JSON"),
) -> None:
    """List keys of a table.

    Without --regex, only the partitions inside the lookback window are
    searched. With --regex, the whole table is scanned.

    Examples:
        kvscope keys watch --regex 'Pod/default'
        kvscope keys all --lookback 24 --match kube-system
    """
    try:
        with open_inspector(db) as inspector:
            if regex is not None:
                result = inspector.list_keys(table, mode=SearchMode.REGEX, max_rows=max_rows, pattern=regex)
            else:
                result = inspector.list_keys(
                    table,
                    mode=SearchMode.PARTITION,
                    max_rows=max_rows,
                    lookback_hours=lookback,
                    key_search=match,
                )
    except KeyspaceError as e:
        fail(e)

    if output_json:
        console.print_json(result.model_dump_json())
        return

    for key in result.keys:
        console.print(key, highlight=False, markup=False)
    console.print()
    console.print(f"[blue]Keys matched:[/blue] {result.matched_count}")
    console.print(f"[blue]Keys searched:[/blue] {result.total_scanned}")
    if result.sizes_known:
        console.print(f"[blue]Size of matched keys:[/blue] {result.total_matched_size}")
    if result.capped:
        console.print(f"[yellow]Reached max rows ({result.max_rows})[/yellow]")


@app.command()
def histogram(
    prefix: str = typer.Argument(..., help="Key prefix, '*' for the whole key-space"),
    db: Optional[str] = typer.Option(None, "--db", help="Database path override"),
    output_json: bool = typer.Option(False, "--json", help="Output raw JSON"),
) -> None:
    """Key counts and sizes per category.

    Examples:
        kvscope histogram '*'
        kvscope histogram /watch/
    """
    try:
        with open_inspector(db) as inspector:
            result = inspector.histogram(prefix)
    except KeyspaceError as e:
        fail(e)

    if output_json:
        console.print_json(result.model_dump_json())
        return

    totals = Table(show_header=False, box=None)
    totals.add_column("Counter", style="cyan")
    totals.add_column("Value", justify="right")
    totals.add_row("Total keys", str(result.total_keys))
    totals.add_row("Total estimated size", str(result.total_estimated_size))
    totals.add_row("Deleted or expired keys", str(result.deleted_or_expired_keys))
    totals.add_row("Internal keys", str(result.internal_keys))
    totals.add_row("Internal keys size", str(result.internal_keys_size))
    totals.add_row("Head keys", str(result.head_keys))
    totals.add_row("Move keys", str(result.move_keys))
    totals.add_row("Discard keys", str(result.discard_keys))
    totals.add_row("Other internal keys", str(result.other_internal_keys))
    totals.add_row("Domain keys", str(result.domain_keys))
    console.print(totals)
    console.print()

    table = Table(title="Categories")
    for column in ("Table", "Partition", "Keys", "Total size", "Min", "Max", "Avg"):
        table.add_column(column, justify="left" if column in ("Table", "Partition") else "right")
    for entry in result.categories:
        stats = entry.stats
        table.add_row(
            entry.table,
            entry.partition_id,
            str(stats.total_keys),
            str(stats.total_size),
            str(stats.minimum_size),
            str(stats.maximum_size),
            str(stats.average_size),
        )
    console.print(table)


@app.command()
def view(
    key: str = typer.Argument(..., help="Raw key"),
    db: Optional[str] = typer.Option(None, "--db", help="Database path override"),
) -> None:
    """Show the decoded value stored at a key.

    Example:
        kvscope view /watch/1704103200/Pod/default/web-0/1704103260000000000
    """
    try:
        with open_inspector(db) as inspector:
            result = inspector.view_key(key)
    except KeyspaceError as e:
        fail(e)

    console.print(f"[green]✓[/green] Table: {result.table}")
    console.print_json(data=result.value)
    if result.extra_name:
        console.print(f"[bold]{result.extra_name}[/bold]")
        console.print(result.extra_value, highlight=False, markup=False)


@app.command()
def tables(db: Optional[str] = typer.Option(None, "--db", help="Database path override")) -> None:
    """List the on-disk tables backing the store."""
    try:
        with open_inspector(db) as inspector:
            files = inspector.storage_tables()
    except KeyspaceError as e:
        fail(e)

    table = Table()
    for column in ("Level", "ID", "Left key", "Right key", "Keys", "Size"):
        table.add_column(column)
    for info in files:
        table.add_row(
            str(info.level), info.id, info.left_key, info.right_key, str(info.key_count), str(info.size)
        )
    console.print(table)


@app.command()
def config() -> None:
    """Show effective configuration."""
    console.print_json(data=settings.model_dump(mode="json"))


@app.command()
def version() -> None:
    """Show version information."""
    from kvscope import __version__

    typer.echo(f"kvscope v{__version__}")


if __name__ == "__main__":
    app()
