"""
Engine binding interfaces for sqlshelf.

A binding owns exactly one live embedded-engine instance. Concrete bindings
implement ``open``/``execute``/``export``/``close``; batch execution and the
catalog helpers are shared and built purely on ``execute``.
"""

from __future__ import annotations

import abc
import enum
from typing import Iterable, List, Optional, Protocol, runtime_checkable

from sqlshelf.domain.models import QueryResult
from sqlshelf.errors import StatementError
from sqlshelf.utils.logging import get_logger

log = get_logger(__name__)


class HandleState(enum.Enum):
    UNOPENED = "unopened"
    OPEN = "open"
    CLOSED = "closed"


@runtime_checkable
class EngineBinding(Protocol):
    """
    Common interface for an open-able, exclusively owned database handle.

    Attributes
    ----------
    database_id : str
        Id of the record the handle was loaded from (display only).
    name : str
        Name of the record the handle was loaded from (display only).
    """

    database_id: str
    name: str

    def open(self, snapshot: Optional[bytes] = None) -> None:
        ...

    def execute(self, statement: str) -> QueryResult:
        ...

    def execute_batch(self, statements: Iterable[str]) -> List[QueryResult]:
        ...

    def export(self) -> bytes:
        ...

    def close(self) -> None:
        ...


class AbstractEngineBinding(abc.ABC):
    """
    ABC helper for concrete bindings.

    Subclasses implement the engine primitives; ``execute_batch``,
    ``list_tables`` and ``table_schema`` come for free.
    """

    def __init__(self, database_id: str = "", name: str = "") -> None:
        self._database_id = database_id
        self._name = name

    @property
    def database_id(self) -> str:
        return self._database_id

    @property
    def name(self) -> str:
        return self._name

    @abc.abstractmethod
    def open(self, snapshot: Optional[bytes] = None) -> None:  # pragma: no cover - interface only
        """Load ``snapshot`` (or an empty database) into a fresh engine."""
        raise NotImplementedError

    @abc.abstractmethod
    def execute(self, statement: str) -> QueryResult:  # pragma: no cover - interface only
        """Execute one statement and return its normalized result."""
        raise NotImplementedError

    @abc.abstractmethod
    def export(self) -> bytes:  # pragma: no cover - interface only
        """Return the full current engine state."""
        raise NotImplementedError

    @abc.abstractmethod
    def close(self) -> None:  # pragma: no cover - interface only
        """Release the engine. Must be idempotent."""
        raise NotImplementedError

    def execute_batch(self, statements: Iterable[str]) -> List[QueryResult]:
        """
        Execute each non-empty statement in order, isolating failures.

        A failing statement contributes an ``Error`` result and the batch moves
        on, so the output always has one entry per non-empty input.
        """
        results: List[QueryResult] = []
        for raw in statements:
            statement = raw.strip()
            if not statement:
                continue
            try:
                results.append(self.execute(statement))
            except StatementError as exc:
                log.debug(
                    "Statement failed inside batch",
                    extra={"database_id": self.database_id, "error": str(exc)},
                )
                results.append(QueryResult.error(str(exc)))
        return results

    def list_tables(self) -> List[str]:
        """Names of all tables, ordered by name."""
        result = self.execute("SELECT name FROM sqlite_master WHERE type='table' ORDER BY name;")
        return [row[0] for row in result.values]

    def table_schema(self, table: str) -> QueryResult:
        """Column metadata (cid, name, type, notnull, dflt_value, pk) for ``table``."""
        quoted = '"' + table.replace('"', '""') + '"'
        return self.execute(f"PRAGMA table_info({quoted});")

    def __enter__(self) -> "AbstractEngineBinding":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


__all__ = ["AbstractEngineBinding", "EngineBinding", "HandleState"]
