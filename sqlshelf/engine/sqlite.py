"""
SQLite engine binding.

Each handle owns one in-memory ``sqlite3`` connection in autocommit mode, so
every statement is applied as soon as it runs and ``export`` always sees a
consistent database. Snapshots move in and out through
``Connection.deserialize``/``Connection.serialize``.
"""

from __future__ import annotations

import sqlite3
from typing import Optional

from sqlshelf.domain.models import DatabaseRecord, QueryResult
from sqlshelf.engine.abstract import AbstractEngineBinding, HandleState
from sqlshelf.errors import EngineInitError, NotInitializedError, StatementError
from sqlshelf.utils.logging import get_logger

log = get_logger(__name__)

# Both must be caught: multi-statement strings raise sqlite3.Warning on older interpreters.
_ENGINE_ERRORS = (sqlite3.Error, sqlite3.Warning)


class SQLiteEngineHandle(AbstractEngineBinding):
    """
    Exclusively owned binding to one in-memory SQLite database.

    Not thread-safe: callers issue one statement at a time per handle.
    """

    def __init__(self, database_id: str = "", name: str = "") -> None:
        super().__init__(database_id=database_id, name=name)
        self._conn: Optional[sqlite3.Connection] = None
        self._state = HandleState.UNOPENED

    @classmethod
    def from_record(cls, record: DatabaseRecord) -> "SQLiteEngineHandle":
        """Open a handle on the snapshot held by ``record``."""
        handle = cls(database_id=record.id, name=record.name)
        handle.open(record.data)
        return handle

    @property
    def state(self) -> HandleState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is HandleState.OPEN

    def _require_open(self) -> sqlite3.Connection:
        if self._conn is None:
            raise NotInitializedError()
        return self._conn

    def open(self, snapshot: Optional[bytes] = None) -> None:
        """
        Initialize the engine from ``snapshot``; an absent or empty snapshot
        yields a new empty database.

        Raises
        ------
        EngineInitError
            If the handle is already open or the snapshot cannot be loaded.
        """
        if self._state is HandleState.OPEN:
            raise EngineInitError("Database is already open; close it before reopening")

        conn = sqlite3.connect(":memory:", isolation_level=None)
        try:
            if snapshot:
                conn.deserialize(bytes(snapshot))
            # deserialize is lazy about validating pages; touch the schema now.
            conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except _ENGINE_ERRORS + (OverflowError,) as exc:
            conn.close()
            raise EngineInitError(f"Failed to open database: {exc}") from exc

        self._conn = conn
        self._state = HandleState.OPEN
        log.debug(
            "Engine opened",
            extra={"database_id": self.database_id, "snapshot_bytes": len(snapshot or b"")},
        )

    def execute(self, statement: str) -> QueryResult:
        """
        Execute one statement.

        The statement is first run as a row-producing query. If it describes
        result columns, every row is collected before returning. If it runs but
        produces no columns, it is reported as a mutation with its change
        count. If it raises, it is retried as a plain script; when that also
        fails the error from the first attempt is raised.

        Raises
        ------
        NotInitializedError
            If the handle is not open.
        StatementError
            If both attempts fail.
        """
        conn = self._require_open()

        try:
            cursor = conn.execute(statement)
            try:
                if cursor.description is not None:
                    columns = [column[0] for column in cursor.description]
                    rows = [list(row) for row in cursor.fetchall()]
                    return QueryResult(columns=columns, values=rows)
                # rowcount is sqlite3_changes() for DML and -1 for everything else.
                rows_affected = max(cursor.rowcount, 0)
            finally:
                cursor.close()
            return QueryResult.success(rows_affected=rows_affected)
        except _ENGINE_ERRORS as exc:
            first_error = exc

        changes_before = conn.total_changes
        try:
            conn.executescript(statement)
        except _ENGINE_ERRORS as exc:
            log.debug(
                "Statement failed",
                extra={
                    "database_id": self.database_id,
                    "error": str(first_error),
                    "fallback_error": str(exc),
                },
            )
            raise StatementError(f"SQL Error: {first_error}") from first_error
        return QueryResult.success(rows_affected=self._script_changes(conn, changes_before))

    @staticmethod
    def _script_changes(conn: sqlite3.Connection, changes_before: int) -> int:
        """Rows changed by the last statement of a script, excluding trigger and cascade writes."""
        if conn.total_changes == changes_before:
            return 0
        return conn.execute("SELECT changes();").fetchone()[0]

    def export(self) -> bytes:
        """Serialize the whole database; raises NotInitializedError when not open."""
        return bytes(self._require_open().serialize())

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None
            log.debug("Engine closed", extra={"database_id": self.database_id})
        self._state = HandleState.CLOSED


__all__ = ["SQLiteEngineHandle"]
