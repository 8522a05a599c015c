"""
Exception hierarchy for sqlshelf.

Engine-level errors describe the state of a single open database handle;
store-level errors describe failures of the backing key-value store. Every
error carries a human-readable message suitable for display.
"""

from __future__ import annotations


class ShelfError(Exception):
    """Base class for all sqlshelf errors."""


class EngineInitError(ShelfError):
    """The embedded engine could not be constructed (e.g. corrupt snapshot bytes)."""


class NotInitializedError(ShelfError):
    """An operation was attempted on a handle that is not open."""

    def __init__(self, message: str = "Database not initialized") -> None:
        super().__init__(message)


class StatementError(ShelfError):
    """A single statement failed on both the row path and the fallback path."""


class PersistError(ShelfError):
    """The backing key-value store failed during save, delete, or clear."""


class SnapshotImportError(ShelfError):
    """The byte source of an import could not be read to completion."""


class DatabaseNotFoundError(ShelfError, LookupError):
    """No stored database exists for the requested id."""

    def __init__(self, database_id: str) -> None:
        super().__init__(f"Database '{database_id}' not found")
        self.database_id = database_id


__all__ = [
    "ShelfError",
    "EngineInitError",
    "NotInitializedError",
    "StatementError",
    "PersistError",
    "SnapshotImportError",
    "DatabaseNotFoundError",
]
