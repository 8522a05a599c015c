"""
Key-value backends for the snapshot store.

A backend is any object implementing the async ``KeyValueStore`` protocol.
Values must be JSON-shaped (dicts, lists, strings, numbers, booleans, null);
raw ``bytes`` never cross this boundary, which is why the snapshot store
transcodes blobs before writing them.
"""

from __future__ import annotations

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional, Protocol, runtime_checkable
from urllib.parse import quote, unquote

from sqlshelf.utils.logging import get_logger

log = get_logger(__name__)

_SUFFIX = ".json"
# Never ends in _SUFFIX, so in-flight writes stay out of key listings.
_TMP_SUFFIX = ".json.tmp"


@runtime_checkable
class KeyValueStore(Protocol):
    """Async get/set/remove/enumerate/clear over string keys."""

    async def get_item(self, key: str) -> Optional[Any]:
        ...

    async def set_item(self, key: str, value: Any) -> None:
        ...

    async def remove_item(self, key: str) -> None:
        ...

    async def keys(self) -> List[str]:
        ...

    async def clear(self) -> None:
        ...


class MemoryKeyValueStore:
    """
    Process-local backend.

    Values are held as JSON text so reads hand back fresh structures, the same
    way a host store's structured serialization would.
    """

    def __init__(self) -> None:
        self._items: Dict[str, str] = {}

    async def get_item(self, key: str) -> Optional[Any]:
        raw = self._items.get(key)
        if raw is None:
            return None
        return json.loads(raw)

    async def set_item(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value)

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    async def keys(self) -> List[str]:
        return list(self._items)

    async def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class JsonFileKeyValueStore:
    """
    Directory-backed backend: one ``<quoted key>.json`` document per key.

    The directory is created on first write. Writes go to a temporary file
    that is then renamed over the target, so a reader never sees a partial
    document. Blocking file I/O runs in a worker thread.
    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self.directory / f"{quote(key, safe='')}{_SUFFIX}"

    def _read(self, path: Path) -> Optional[Any]:
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        return json.loads(text)

    def _write(self, path: Path, text: str) -> None:
        self.directory.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=_TMP_SUFFIX)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(text)
            os.replace(tmp_name, path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

    def _list_keys(self) -> List[str]:
        if not self.directory.is_dir():
            return []
        return sorted(
            unquote(path.name[: -len(_SUFFIX)])
            for path in self.directory.glob(f"*{_SUFFIX}")
        )

    def _clear(self) -> None:
        if not self.directory.is_dir():
            return
        for path in self.directory.glob(f"*{_SUFFIX}"):
            path.unlink(missing_ok=True)

    async def get_item(self, key: str) -> Optional[Any]:
        return await asyncio.to_thread(self._read, self._path(key))

    async def set_item(self, key: str, value: Any) -> None:
        text = json.dumps(value)
        await asyncio.to_thread(self._write, self._path(key), text)

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._path(key).unlink, missing_ok=True)

    async def keys(self) -> List[str]:
        return await asyncio.to_thread(self._list_keys)

    async def clear(self) -> None:
        await asyncio.to_thread(self._clear)
        log.debug("Backend cleared", extra={"directory": str(self.directory)})


__all__ = ["JsonFileKeyValueStore", "KeyValueStore", "MemoryKeyValueStore"]
