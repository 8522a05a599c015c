"""
Snapshot store construction.

Builds the configured key-value backend and wraps it in a ``SnapshotStore``.
The returned store is owned by the caller: construct it once at startup and
hand the same instance to every consumer instead of reaching for a global.
"""

from __future__ import annotations

from typing import Callable, Optional

from sqlshelf.config import Settings, get_settings
from sqlshelf.infrastructure.kv_store import (
    JsonFileKeyValueStore,
    KeyValueStore,
    MemoryKeyValueStore,
)
from sqlshelf.snapshot_store import SkipEvent, SnapshotStore
from sqlshelf.utils.logging import get_logger

log = get_logger(__name__)


def build_backend(settings: Optional[Settings] = None) -> KeyValueStore:
    """
    Create the key-value backend named by ``settings.store_backend``.

    Parameters
    ----------
    settings : Settings, optional
        Effective configuration; defaults to ``get_settings()``.

    Returns
    -------
    KeyValueStore
        A file backend rooted at ``settings.store_path`` or an in-memory one.
    """
    settings = settings or get_settings()
    if settings.store_backend == "memory":
        return MemoryKeyValueStore()
    return JsonFileKeyValueStore(settings.store_path)


def open_store(
    settings: Optional[Settings] = None,
    on_skip: Optional[Callable[[SkipEvent], None]] = None,
) -> SnapshotStore:
    """Build a ``SnapshotStore`` over the configured backend."""
    settings = settings or get_settings()
    backend = build_backend(settings)
    log.debug(
        "Snapshot store ready",
        extra={"backend": settings.store_backend, "path": str(settings.store_path)},
    )
    return SnapshotStore(backend, settings=settings, on_skip=on_skip)


__all__ = ["build_backend", "open_store"]
