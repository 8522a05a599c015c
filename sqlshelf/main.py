from __future__ import annotations

import asyncio
import json
import sys
from pathlib import Path
from typing import NoReturn, Optional

import typer

from sqlshelf.config import get_settings
from sqlshelf.engine.sqlite import SQLiteEngineHandle
from sqlshelf.errors import DatabaseNotFoundError, ShelfError
from sqlshelf.infrastructure.store_factory import open_store
from sqlshelf.reporter import print_databases, print_results, print_tables
from sqlshelf.samples import SAMPLE_QUERIES, samples_for
from sqlshelf.session import EditorSession
from sqlshelf.snapshot_store import SnapshotStore
from sqlshelf.utils.logging import configure_logging

app = typer.Typer(help="Keep SQLite databases on a shelf and query them.")


def _fail(message: str) -> NoReturn:
    typer.echo(message, err=True)
    raise typer.Exit(code=1)


def _store() -> SnapshotStore:
    return open_store(get_settings())


@app.callback()
def _configure() -> None:
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)


@app.command()
def info() -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    typer.echo(
        f"backend={settings.store_backend} path={settings.store_path} "
        f"export={settings.export_extension} ({settings.export_media_type}) "
        f"env={settings.app_env}"
    )


@app.command("list")
def list_databases(
    search: Optional[str] = typer.Option(None, "--search", "-s", help="Filter by name."),
) -> None:
    """
    List stored databases, most recently modified first.
    """
    store = _store()
    records = asyncio.run(store.search(search) if search else store.list())
    print_databases(records)


@app.command()
def create(name: str = typer.Argument(..., help="Name of the new database.")) -> None:
    """
    Create a new empty database.
    """
    try:
        record = asyncio.run(_store().create(name))
    except (ShelfError, ValueError) as exc:
        _fail(str(exc))
    typer.echo(f'Database "{record.name}" created successfully ({record.id})')


@app.command()
def delete(database_id: str = typer.Argument(..., help="Id of the database to delete.")) -> None:
    """
    Delete a stored database.
    """
    try:
        asyncio.run(_store().delete(database_id))
    except ShelfError as exc:
        _fail(str(exc))
    typer.echo(f"Database {database_id} deleted")


async def _run_script(database_id: str, script: str):
    async with await EditorSession.open(_store(), database_id) as session:
        return await session.run(script)


@app.command()
def run(
    database_id: str = typer.Argument(..., help="Id of the database to query."),
    sql: Optional[str] = typer.Option(None, "--sql", "-q", help="Statements to execute."),
    file: Optional[Path] = typer.Option(None, "--file", "-f", help="Read statements from a file."),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON."),
) -> None:
    """
    Execute statements against a database and save the result.
    """
    if (sql is None) == (file is None):
        _fail("Pass exactly one of --sql or --file")
    try:
        script = sql if sql is not None else file.read_text(encoding="utf-8")
    except OSError as exc:
        _fail(f"Failed to read file: {exc}")

    try:
        report = asyncio.run(_run_script(database_id, script))
    except (ShelfError, ValueError) as exc:
        _fail(str(exc))

    if as_json:
        payload = [result.to_json_dict() for result in report.results]
        typer.echo(json.dumps(payload, indent=2))
    else:
        print_results(report.results, profile=report.profile)


@app.command()
def tables(
    database_id: str = typer.Argument(..., help="Id of the database to inspect."),
    table: Optional[str] = typer.Option(None, "--table", "-t", help="Show columns of one table."),
) -> None:
    """
    List tables, or the column metadata of one table.
    """
    store = _store()
    record = asyncio.run(store.load(database_id))
    if record is None:
        _fail(str(DatabaseNotFoundError(database_id)))
    try:
        with SQLiteEngineHandle.from_record(record) as handle:
            if table:
                print_results([handle.table_schema(table)])
            else:
                print_tables(handle.list_tables())
    except ShelfError as exc:
        _fail(str(exc))


@app.command("import")
def import_database(path: Path = typer.Argument(..., help="SQLite file to import.")) -> None:
    """
    Import a database file as a new stored database.
    """
    store = _store()

    async def _import():
        record = await store.import_file(path)
        await store.save(record)
        return record

    try:
        record = asyncio.run(_import())
    except ShelfError as exc:
        _fail(str(exc))
    typer.echo(f'Database "{record.name}" imported successfully ({record.id})')


@app.command()
def export(
    database_id: str = typer.Argument(..., help="Id of the database to export."),
    output: Optional[Path] = typer.Option(
        None, "--output", "-o", help="Destination file (default: <name>.sqlite in cwd)."
    ),
) -> None:
    """
    Write a stored database to a file.
    """
    blob = asyncio.run(_store().export_blob(database_id))
    if blob is None:
        _fail(str(DatabaseNotFoundError(database_id)))
    target = output or Path.cwd() / blob.filename
    try:
        target.write_bytes(blob.data)
    except OSError as exc:
        _fail(f"Failed to write file: {exc}")
    typer.echo(f"Exported {blob.size} bytes to {target}")


@app.command()
def clear(
    yes: bool = typer.Option(False, "--yes", "-y", help="Confirm removal of every database."),
) -> None:
    """
    Remove every stored database.
    """
    if not yes:
        _fail("Refusing to clear without --yes")
    try:
        asyncio.run(_store().clear())
    except ShelfError as exc:
        _fail(str(exc))
    typer.echo("All databases removed")


@app.command()
def samples(level: Optional[str] = typer.Argument(None, help="beginner, intermediate or advanced.")) -> None:
    """
    Print sample statements to try.
    """
    levels = [level] if level else list(SAMPLE_QUERIES)
    for name in levels:
        try:
            statements = samples_for(name)
        except ValueError as exc:
            _fail(str(exc))
        typer.echo(f"-- {name}")
        for statement in statements:
            typer.echo(statement)


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
