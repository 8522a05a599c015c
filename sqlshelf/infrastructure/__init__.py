"""
Infrastructure package for sqlshelf.

Centralizes the key-value backends that hold stored snapshots and the factory
that wires them into a ``SnapshotStore``. Keep this layer focused on I/O.
"""

from sqlshelf.infrastructure.kv_store import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)

__all__ = [
    "JsonFileKeyValueStore",
    "KeyValueStore",
    "MemoryKeyValueStore",
]
