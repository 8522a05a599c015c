"""
Domain package for sqlshelf.

Exports the record and result models shared by the engine binding, the
snapshot store, and the CLI. Keep this package focused on data definitions.
"""

from sqlshelf.domain.models import (
    Cell,
    CellKind,
    DatabaseRecord,
    QueryResult,
    cell_kind,
    json_cell,
    name_from_filename,
    new_database_id,
)

__all__ = [
    "Cell",
    "CellKind",
    "DatabaseRecord",
    "QueryResult",
    "cell_kind",
    "json_cell",
    "name_from_filename",
    "new_database_id",
]
