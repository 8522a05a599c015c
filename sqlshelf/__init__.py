"""
sqlshelf - keep many embedded SQLite databases and query them.

This package provides:

- An engine binding that executes free-form statements against one in-memory
  SQLite database and normalizes every outcome into a ``QueryResult``
- A snapshot store that persists each database's full binary state in an
  async key-value backend and imports/exports it as plain files
- Editor sessions tying the two together, plus a Typer CLI

Statement failures are isolated per statement; store reads are lenient so one
damaged record never hides the others.
"""

from __future__ import annotations

__version__ = "0.1.0"
__license__ = "MIT"

# Public API exports
from sqlshelf.config import Settings, get_settings
from sqlshelf.domain.models import Cell, CellKind, DatabaseRecord, QueryResult
from sqlshelf.engine import AbstractEngineBinding, EngineBinding, SQLiteEngineHandle
from sqlshelf.errors import (
    DatabaseNotFoundError,
    EngineInitError,
    NotInitializedError,
    PersistError,
    ShelfError,
    SnapshotImportError,
    StatementError,
)
from sqlshelf.infrastructure import JsonFileKeyValueStore, KeyValueStore, MemoryKeyValueStore
from sqlshelf.infrastructure.store_factory import build_backend, open_store
from sqlshelf.session import EditorSession, RunReport, split_statements
from sqlshelf.snapshot_store import ExportedBlob, LoadResult, LoadStatus, SkipEvent, SnapshotStore
from sqlshelf.utils.logging import configure_logging, get_logger

__all__ = [
    # Version info
    "__version__",
    "__license__",
    # Configuration
    "Settings",
    "get_settings",
    # Domain
    "Cell",
    "CellKind",
    "DatabaseRecord",
    "QueryResult",
    # Engine
    "AbstractEngineBinding",
    "EngineBinding",
    "SQLiteEngineHandle",
    # Storage
    "ExportedBlob",
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "LoadResult",
    "LoadStatus",
    "MemoryKeyValueStore",
    "SkipEvent",
    "SnapshotStore",
    "build_backend",
    "open_store",
    # Sessions
    "EditorSession",
    "RunReport",
    "split_statements",
    # Errors
    "DatabaseNotFoundError",
    "EngineInitError",
    "NotInitializedError",
    "PersistError",
    "ShelfError",
    "SnapshotImportError",
    "StatementError",
    # Logging
    "configure_logging",
    "get_logger",
]
