"""
Pytest configuration for sqlshelf.

Provides fixtures for:
- Settings pointed at a temporary store directory
- In-memory and file-backed snapshot stores
- Open engine handles, empty and seeded
- An isolated environment for CLI invocations
"""

from __future__ import annotations

from pathlib import Path
from typing import Generator

import pytest

from sqlshelf.config import Settings, get_settings
from sqlshelf.engine.sqlite import SQLiteEngineHandle
from sqlshelf.infrastructure.kv_store import JsonFileKeyValueStore, MemoryKeyValueStore
from sqlshelf.snapshot_store import SnapshotStore


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture with a per-test store directory.
    """
    return Settings(
        store_backend="memory",
        store_dir=tmp_path / "shelf",
        log_level="DEBUG",
    )


@pytest.fixture
def memory_backend() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(memory_backend: MemoryKeyValueStore, test_settings: Settings) -> SnapshotStore:
    return SnapshotStore(memory_backend, settings=test_settings)


@pytest.fixture
def file_store(test_settings: Settings) -> SnapshotStore:
    return SnapshotStore(JsonFileKeyValueStore(test_settings.store_path), settings=test_settings)


@pytest.fixture
def handle() -> Generator[SQLiteEngineHandle, None, None]:
    """
    An open handle on a new empty database, closed after the test.
    """
    engine = SQLiteEngineHandle(database_id="db_test", name="test")
    engine.open()
    try:
        yield engine
    finally:
        engine.close()


@pytest.fixture
def seeded_handle(handle: SQLiteEngineHandle) -> SQLiteEngineHandle:
    """
    Handle holding a small ``students`` table with three rows.
    """
    handle.execute("CREATE TABLE students (id INTEGER PRIMARY KEY, name TEXT, age INTEGER);")
    handle.execute(
        "INSERT INTO students (name, age) VALUES ('Alice', 20), ('Bob', 22), ('Charlie', 19);"
    )
    return handle


@pytest.fixture
def cli_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Generator[Path, None, None]:
    """
    Point the CLI at a file store under ``tmp_path`` and keep its logs quiet.
    """
    store_dir = tmp_path / "cli-shelf"
    monkeypatch.setenv("SQLSHELF_STORE_BACKEND", "file")
    monkeypatch.setenv("SQLSHELF_STORE_DIR", str(store_dir))
    monkeypatch.setenv("LOG_LEVEL", "WARNING")
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    try:
        yield store_dir
    finally:
        get_settings.cache_clear()
