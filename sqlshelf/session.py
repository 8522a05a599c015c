"""
Editor sessions: load a stored snapshot, run scripts against it, save it back.

Usage:
    from sqlshelf.session import EditorSession

    async with await EditorSession.open(store, database_id) as session:
        report = await session.run("CREATE TABLE t (id INTEGER); INSERT INTO t VALUES (1);")
        print(report.results, report.duration_ms)

A snapshot is taken only after a whole batch has finished, so the stored blob
is never captured mid-statement.
"""

from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from typing import List

from sqlshelf.domain.models import DatabaseRecord, QueryResult
from sqlshelf.engine.sqlite import SQLiteEngineHandle
from sqlshelf.errors import DatabaseNotFoundError
from sqlshelf.snapshot_store import SnapshotStore
from sqlshelf.utils.logging import get_logger
from sqlshelf.utils.profiler import ProfileStats, profile_block

log = get_logger(__name__)


def split_statements(script: str) -> List[str]:
    """
    Split a script into trimmed statements on ``;``.

    A ``;`` inside a string literal, comment or trigger body does not end a
    statement. Blank statements are dropped; trailing text without a
    terminator is kept as the last statement.
    """
    statements: List[str] = []
    pieces = script.split(";")
    buffer = ""
    for index, piece in enumerate(pieces):
        buffer += piece
        if index == len(pieces) - 1:
            break
        candidate = buffer + ";"
        if sqlite3.complete_statement(candidate):
            if buffer.strip():
                statements.append(candidate.strip())
            buffer = ""
        else:
            buffer = candidate
    if buffer.strip():
        statements.append(buffer.strip())
    return statements


@dataclass
class RunReport:
    """Per-run outcome: one result per statement plus timing and the table list."""

    results: List[QueryResult]
    profile: ProfileStats
    tables: List[str] = field(default_factory=list)

    @property
    def duration_ms(self) -> float:
        return self.profile.duration_ms

    @property
    def error_count(self) -> int:
        return sum(1 for result in self.results if result.is_error)


class EditorSession:
    """
    One open editing session over a stored database.

    The session owns its engine handle exclusively. ``record`` always reflects
    the last snapshot that was saved successfully.
    """

    def __init__(self, store: SnapshotStore, record: DatabaseRecord, handle: SQLiteEngineHandle):
        self._store = store
        self._record = record
        self._handle = handle

    @classmethod
    async def open(cls, store: SnapshotStore, database_id: str) -> "EditorSession":
        """
        Load ``database_id`` from ``store`` and open an engine on its snapshot.

        Raises
        ------
        DatabaseNotFoundError
            If the store holds no readable record for the id.
        EngineInitError
            If the stored snapshot cannot be loaded by the engine.
        """
        record = await store.load(database_id)
        if record is None:
            raise DatabaseNotFoundError(database_id)
        handle = SQLiteEngineHandle.from_record(record)
        log.info(
            f"Database '{record.name}' loaded",
            extra={"database_id": record.id, "snapshot_bytes": record.size_bytes},
        )
        return cls(store, record, handle)

    @property
    def record(self) -> DatabaseRecord:
        return self._record

    @property
    def handle(self) -> SQLiteEngineHandle:
        return self._handle

    async def run(self, script: str) -> RunReport:
        """
        Execute every statement in ``script`` and persist the resulting snapshot.

        Statement failures are reported inline and never stop the batch. A
        failed save raises ``PersistError`` and leaves ``record`` unchanged.
        """
        statements = split_statements(script)
        if not statements:
            raise ValueError("Please enter a SQL query")

        with profile_block(f"run:{self._record.id}") as stats:
            results = self._handle.execute_batch(statements)
        tables = self._handle.list_tables()
        log.info(
            f"Query executed in {stats.duration_ms:.2f}ms",
            extra={
                "database_id": self._record.id,
                "statements": len(statements),
                "errors": sum(1 for result in results if result.is_error),
            },
        )
        await self.save()
        return RunReport(results=results, profile=stats, tables=tables)

    async def save(self) -> DatabaseRecord:
        """Export the engine state and store it with a fresh ``last_modified``."""
        updated = self._record.with_snapshot(self._handle.export())
        await self._store.save(updated)
        self._record = updated
        return updated

    def close(self) -> None:
        self._handle.close()

    async def __aenter__(self) -> "EditorSession":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["EditorSession", "RunReport", "split_statements"]
