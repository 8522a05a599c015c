"""
Snapshot store: durable mapping from database id to DatabaseRecord.

Records are written to an async key-value backend as JSON-shaped documents.
The snapshot blob becomes a list of byte values and the timestamps become
ISO-8601 text, so a record survives any backend that only understands JSON.

Reads are lenient: a document that cannot be decoded is logged, recorded as a
``SkipEvent``, and reported as missing, so one damaged entry never blocks
listing the others.

Usage:
    from sqlshelf.infrastructure import MemoryKeyValueStore
    from sqlshelf.snapshot_store import SnapshotStore

    store = SnapshotStore(MemoryKeyValueStore())
    record = await store.create("scratch")
    assert await store.load(record.id) == record

Known limitation: concurrent ``save``/``delete`` calls for the same id race
with last-write-wins semantics; there is no version check.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Annotated, Any, BinaryIO, Callable, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError

from sqlshelf.config import Settings, get_settings
from sqlshelf.domain.models import DatabaseRecord, name_from_filename, utcnow
from sqlshelf.errors import PersistError, SnapshotImportError
from sqlshelf.infrastructure.kv_store import KeyValueStore
from sqlshelf.utils.logging import get_logger

log = get_logger(__name__)

ByteSource = Union[bytes, bytearray, memoryview, BinaryIO]

Byte = Annotated[int, Field(strict=True, ge=0, le=255)]


class StoredRecord(BaseModel):
    """
    Wire shape of a record inside the key-value backend.
    """

    id: str = Field(..., min_length=1)
    name: str
    data: List[Byte] = Field(default_factory=list)
    created_at: datetime = Field(..., alias="createdAt")
    last_modified: datetime = Field(..., alias="lastModified")

    model_config = {
        "populate_by_name": True,
        "extra": "ignore",
    }

    @classmethod
    def from_record(cls, record: DatabaseRecord) -> "StoredRecord":
        return cls(
            id=record.id,
            name=record.name,
            data=list(record.data),
            created_at=record.created_at,
            last_modified=record.last_modified,
        )

    def to_record(self) -> DatabaseRecord:
        return DatabaseRecord(
            id=self.id,
            name=self.name,
            data=bytes(self.data),
            created_at=self.created_at,
            last_modified=self.last_modified,
        )

    def to_document(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)


class LoadStatus(str, enum.Enum):
    FOUND = "found"
    ABSENT = "absent"
    CORRUPT = "corrupt"


@dataclass(frozen=True)
class LoadResult:
    """Outcome of reading one id: found, absent, or corrupt and skipped."""

    database_id: str
    status: LoadStatus
    record: Optional[DatabaseRecord] = None
    error: Optional[str] = None


@dataclass(frozen=True)
class SkipEvent:
    """A stored document that could not be decoded and was treated as absent."""

    database_id: str
    error: str
    at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class ExportedBlob:
    """A snapshot packaged as a downloadable file payload."""

    filename: str
    media_type: str
    data: bytes

    @property
    def size(self) -> int:
        return len(self.data)


def _read_source(source: ByteSource) -> bytes:
    if isinstance(source, (bytes, bytearray, memoryview)):
        return bytes(source)
    read = getattr(source, "read", None)
    if read is None:
        raise SnapshotImportError(
            f"Failed to import database: unsupported source {type(source).__name__}"
        )
    try:
        data = read()
    except OSError as exc:
        raise SnapshotImportError(f"Failed to read file: {exc}") from exc
    if not isinstance(data, (bytes, bytearray)):
        raise SnapshotImportError("Failed to import database: source did not yield bytes")
    return bytes(data)


class SnapshotStore:
    """
    Caller-owned store of database snapshots over a ``KeyValueStore`` backend.

    Create one at startup and pass it to whoever needs it.

    Parameters
    ----------
    backend : KeyValueStore
        Async key-value backend holding one document per database id.
    settings : Settings, optional
        Source of export naming; defaults to ``get_settings()``.
    on_skip : callable, optional
        Invoked with each ``SkipEvent`` raised by a lenient read.
    """

    def __init__(
        self,
        backend: KeyValueStore,
        settings: Optional[Settings] = None,
        on_skip: Optional[Callable[[SkipEvent], None]] = None,
    ) -> None:
        self._backend = backend
        self._settings = settings or get_settings()
        self._on_skip = on_skip
        self.skipped: List[SkipEvent] = []

    @property
    def backend(self) -> KeyValueStore:
        return self._backend

    async def save(self, record: DatabaseRecord) -> None:
        """
        Write ``record`` under its id, replacing any previous document.

        Raises
        ------
        PersistError
            If the backend rejects the write.
        """
        document = StoredRecord.from_record(record).to_document()
        try:
            await self._backend.set_item(record.id, document)
        except Exception as exc:  # noqa: BLE001 - backends are pluggable; wrap whatever they raise
            raise PersistError(f"Failed to save database: {exc}") from exc
        log.info(
            "Database saved",
            extra={"database_id": record.id, "snapshot_bytes": record.size_bytes},
        )

    def _skip(self, database_id: str, exc: Exception) -> LoadResult:
        event = SkipEvent(database_id=database_id, error=str(exc))
        self.skipped.append(event)
        log.warning(
            "Skipping unreadable database",
            extra={"database_id": database_id, "error": event.error},
        )
        if self._on_skip is not None:
            self._on_skip(event)
        return LoadResult(database_id=database_id, status=LoadStatus.CORRUPT, error=event.error)

    async def read(self, database_id: str) -> LoadResult:
        """Read one id and report whether it was found, absent, or corrupt."""
        try:
            document = await self._backend.get_item(database_id)
        except (OSError, ValueError) as exc:
            return self._skip(database_id, exc)
        if document is None:
            return LoadResult(database_id=database_id, status=LoadStatus.ABSENT)
        try:
            record = StoredRecord.model_validate(document).to_record()
        except ValidationError as exc:
            return self._skip(database_id, exc)
        return LoadResult(database_id=database_id, status=LoadStatus.FOUND, record=record)

    async def load(self, database_id: str) -> Optional[DatabaseRecord]:
        """Return the record for ``database_id``, or None if absent or unreadable."""
        return (await self.read(database_id)).record

    async def list(self) -> List[DatabaseRecord]:
        """
        All readable records, most recently modified first.

        Records with equal ``last_modified`` keep the backend's key order.
        """
        try:
            keys = await self._backend.keys()
        except Exception as exc:  # noqa: BLE001 - backends are pluggable; wrap whatever they raise
            raise PersistError(f"Failed to list databases: {exc}") from exc

        records: List[DatabaseRecord] = []
        for key in keys:
            record = await self.load(key)
            if record is not None:
                records.append(record)
        return sorted(records, key=lambda r: r.last_modified, reverse=True)

    async def search(self, term: str) -> List[DatabaseRecord]:
        """Records whose name contains ``term`` (case-insensitive), in list order."""
        needle = term.strip().lower()
        records = await self.list()
        if not needle:
            return records
        return [record for record in records if needle in record.name.lower()]

    async def create(self, name: str) -> DatabaseRecord:
        """Create, persist, and return a new empty database named ``name``."""
        label = name.strip()
        if not label:
            raise ValueError("Please enter a database name")
        record = DatabaseRecord.new(label)
        await self.save(record)
        log.info("Database created", extra={"database_id": record.id, "database_name": label})
        return record

    async def delete(self, database_id: str) -> None:
        """Remove a record; deleting an unknown id is not an error."""
        try:
            await self._backend.remove_item(database_id)
        except Exception as exc:  # noqa: BLE001 - backends are pluggable; wrap whatever they raise
            raise PersistError(f"Failed to delete database: {exc}") from exc
        log.info("Database deleted", extra={"database_id": database_id})

    async def clear(self) -> None:
        """Remove every record."""
        try:
            await self._backend.clear()
        except Exception as exc:  # noqa: BLE001 - backends are pluggable; wrap whatever they raise
            raise PersistError(f"Failed to clear databases: {exc}") from exc
        log.info("All databases cleared")

    async def export_blob(self, database_id: str) -> Optional[ExportedBlob]:
        """Package the stored snapshot for download; None if the id is unknown."""
        record = await self.load(database_id)
        if record is None:
            return None
        return ExportedBlob(
            filename=f"{record.name}{self._settings.export_extension}",
            media_type=self._settings.export_media_type,
            data=record.data,
        )

    async def import_from_bytes(self, filename: str, source: ByteSource) -> DatabaseRecord:
        """
        Build a brand-new record from imported bytes. The record is not saved.

        Raises
        ------
        SnapshotImportError
            If ``source`` cannot be read to completion.
        """
        data = _read_source(source)
        record = DatabaseRecord.new(name_from_filename(filename), data)
        log.info(
            "Database imported",
            extra={"database_id": record.id, "source_filename": filename, "snapshot_bytes": len(data)},
        )
        return record

    async def import_file(self, path: Path | str) -> DatabaseRecord:
        """Read ``path`` from disk and import it; the record is not saved."""
        path = Path(path)
        try:
            with path.open("rb") as fh:
                return await self.import_from_bytes(path.name, fh)
        except OSError as exc:
            raise SnapshotImportError(f"Failed to read file: {exc}") from exc


__all__ = [
    "ExportedBlob",
    "LoadResult",
    "LoadStatus",
    "SkipEvent",
    "SnapshotStore",
    "StoredRecord",
]
