from __future__ import annotations

from typing import List, Optional, Sequence

from rich import box
from rich.console import Console
from rich.table import Table
from rich.text import Text

from sqlshelf.domain.models import Cell, CellKind, DatabaseRecord, QueryResult, cell_kind
from sqlshelf.utils.profiler import ProfileStats


def format_cell(value: Cell) -> str:
    """
    Render one result cell as display text.

    NULL shows as ``NULL``; blobs show their size and a short hex prefix.
    Raises TypeError for values that are not one of the five cell kinds.
    """
    kind = cell_kind(value)
    if kind is CellKind.NULL:
        return "NULL"
    if kind is CellKind.BLOB:
        raw = bytes(value)
        preview = raw[:8].hex()
        suffix = "…" if len(raw) > 8 else ""
        return f"<blob {len(raw)} bytes {preview}{suffix}>"
    return str(value)


def format_size(size_bytes: int) -> str:
    if size_bytes < 1024:
        return f"{size_bytes} B"
    if size_bytes < 1024**2:
        return f"{size_bytes / 1024:.1f} KB"
    return f"{size_bytes / 1024**2:.1f} MB"


def format_profile(profile: ProfileStats) -> str:
    """One-line summary of a run: duration, peak memory and CPU usage."""
    mem_str = "N/A"
    if profile.peak_rss_bytes is not None:
        mem_str = f"{profile.peak_rss_bytes / (1024 * 1024):.2f} MB"
    cpu_str = "N/A"
    if profile.cpu_percent is not None:
        cpu_str = f"{profile.cpu_percent:.1f}%"
    return f"Query executed in {profile.duration_ms:.2f}ms (peak memory: {mem_str}, CPU: {cpu_str})"


def build_result_table(result: QueryResult, index: Optional[int] = None) -> Table:
    """Build a rich table for one statement result."""
    title = f"Result {index}" if index is not None else None
    if result.is_error:
        title = f"{title} [red](error)[/red]" if title else "[red]Error[/red]"
    caption = None
    if result.rows_affected is not None:
        caption = f"{result.rows_affected} row(s) affected"
    elif not result.is_error:
        caption = f"{result.row_count} row(s)"

    table = Table(title=title, caption=caption, box=box.ROUNDED)
    style = "red" if result.is_error else None
    for column in result.columns:
        table.add_column(Text(column), style=style)
    for row in result.values:
        table.add_row(*(Text(format_cell(cell)) for cell in row))
    return table


def print_results(
    results: Sequence[QueryResult],
    profile: Optional[ProfileStats] = None,
    console: Optional[Console] = None,
) -> None:
    """
    Render every statement result as its own table, in execution order.
    """
    console = console or Console()

    if not results:
        console.print("[yellow]No results to display.[/yellow]")
        return

    for index, result in enumerate(results, start=1):
        console.print(build_result_table(result, index=index if len(results) > 1 else None))

    if profile is not None:
        console.print(f"[dim]{format_profile(profile)}[/dim]")


def print_databases(records: List[DatabaseRecord], console: Optional[Console] = None) -> None:
    """
    Render stored databases, most recently modified first.
    """
    console = console or Console()

    if not records:
        console.print("[yellow]No databases yet. Create one to get started.[/yellow]")
        return

    table = Table(
        title="Databases",
        box=box.ROUNDED,
        caption="Sorted by last modified (descending)",
    )
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Size", justify="right", style="magenta")
    table.add_column("Created", style="green")
    table.add_column("Last Modified", style="yellow")

    for record in records:
        table.add_row(
            record.id,
            Text(record.name),
            format_size(record.size_bytes),
            record.created_at.strftime("%Y-%m-%d %H:%M"),
            record.last_modified.strftime("%Y-%m-%d %H:%M"),
        )

    console.print(table)


def print_tables(tables: List[str], console: Optional[Console] = None) -> None:
    console = console or Console()
    if not tables:
        console.print("[yellow]No tables.[/yellow]")
        return
    for name in tables:
        console.print(Text(f"- {name}"))


__all__ = [
    "build_result_table",
    "format_cell",
    "format_profile",
    "format_size",
    "print_databases",
    "print_results",
    "print_tables",
]
