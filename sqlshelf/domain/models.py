"""
Domain models for sqlshelf.

Defines the persisted database record, the normalized per-statement query
result, and the scalar cell variant produced by the embedded engine.
"""
from __future__ import annotations

import re
import secrets
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import PurePosixPath
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, field_validator

SUCCESS_MESSAGE = "Query executed successfully"
RESULT_COLUMN = "Result"
ERROR_COLUMN = "Error"

Cell = Union[None, int, float, str, bytes]


class CellKind(str, Enum):
    """The five scalar shapes a result cell can take."""

    NULL = "null"
    INTEGER = "integer"
    REAL = "real"
    TEXT = "text"
    BLOB = "blob"


def cell_kind(value: Any) -> CellKind:
    """Classify a cell value; raises TypeError for anything outside the five kinds."""
    if value is None:
        return CellKind.NULL
    if isinstance(value, bool):
        raise TypeError("Boolean values are not valid result cells")
    if isinstance(value, int):
        return CellKind.INTEGER
    if isinstance(value, float):
        return CellKind.REAL
    if isinstance(value, str):
        return CellKind.TEXT
    if isinstance(value, (bytes, bytearray, memoryview)):
        return CellKind.BLOB
    raise TypeError(f"Unsupported cell value type: {type(value).__name__}")


def json_cell(value: Any) -> Any:
    """JSON-safe form of a cell: blobs become lowercase hex, the other kinds pass through."""
    if cell_kind(value) is CellKind.BLOB:
        return bytes(value).hex()
    return value


@dataclass
class QueryResult:
    """
    Normalized outcome of one statement.

    Row-producing statements carry their column names and rows and leave
    ``rows_affected`` unset. Mutating statements carry the synthetic
    ``Result`` column and the number of rows they changed.
    """

    columns: List[str]
    values: List[List[Cell]] = field(default_factory=list)
    rows_affected: Optional[int] = None
    is_error: bool = False

    @classmethod
    def success(cls, rows_affected: int) -> "QueryResult":
        return cls(
            columns=[RESULT_COLUMN],
            values=[[SUCCESS_MESSAGE]],
            rows_affected=rows_affected,
        )

    @classmethod
    def error(cls, message: str) -> "QueryResult":
        return cls(columns=[ERROR_COLUMN], values=[[message]], is_error=True)

    @property
    def row_count(self) -> int:
        return len(self.values)

    def to_dict(self) -> Dict[str, Any]:
        """Plain mapping in the caller-facing shape (``rowsAffected`` only when set)."""
        payload: Dict[str, Any] = {"columns": list(self.columns), "values": self.values}
        if self.rows_affected is not None:
            payload["rowsAffected"] = self.rows_affected
        return payload

    def to_json_dict(self) -> Dict[str, Any]:
        """Like ``to_dict`` with every cell passed through ``json_cell``."""
        payload = self.to_dict()
        payload["values"] = [[json_cell(cell) for cell in row] for row in self.values]
        return payload


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_database_id() -> str:
    """
    Build a fresh database id from the current time in milliseconds and a
    random token, so two ids minted in the same millisecond still differ.
    """
    return f"db_{int(time.time() * 1000)}_{secrets.token_hex(6)}"


_EXTENSION_RE = re.compile(r"\.[^/.]+$")


def name_from_filename(filename: str) -> str:
    """Strip directories and the final extension; fall back to a generated name."""
    base = PurePosixPath(filename.replace("\\", "/")).name
    name = _EXTENSION_RE.sub("", base).strip()
    return name or f"Imported Database {int(time.time() * 1000)}"


class DatabaseRecord(BaseModel):
    """
    A persisted database: identity, label, and the full binary snapshot.
    """

    id: str = Field(..., min_length=1, description="Opaque id assigned at creation.")
    name: str = Field(..., description="User-facing label.")
    data: bytes = Field(b"", repr=False, description="Complete engine snapshot.")
    created_at: datetime = Field(..., description="Creation timestamp (UTC).")
    last_modified: datetime = Field(..., description="Timestamp of the last successful save.")

    model_config = {
        "frozen": True,
        "populate_by_name": True,
    }

    @field_validator("created_at", "last_modified")
    @classmethod
    def _assume_utc(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    @classmethod
    def new(cls, name: str, data: bytes = b"") -> "DatabaseRecord":
        now = utcnow()
        return cls(id=new_database_id(), name=name, data=data, created_at=now, last_modified=now)

    def with_snapshot(self, data: bytes) -> "DatabaseRecord":
        """Copy of this record holding ``data`` and a fresh ``last_modified``."""
        return self.model_copy(update={"data": bytes(data), "last_modified": utcnow()})

    @property
    def size_bytes(self) -> int:
        return len(self.data)


__all__ = [
    "Cell",
    "CellKind",
    "DatabaseRecord",
    "QueryResult",
    "ERROR_COLUMN",
    "RESULT_COLUMN",
    "SUCCESS_MESSAGE",
    "cell_kind",
    "json_cell",
    "name_from_filename",
    "new_database_id",
    "utcnow",
]
