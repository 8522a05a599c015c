"""
End-to-end tests for sqlshelf.

These tests exercise the file-backed store and the CLI together:
1. Databases survive across independently constructed stores
2. Import/export round-trips real SQLite files
3. The CLI commands drive the same store
"""

from __future__ import annotations

import json
import re
import sqlite3
from pathlib import Path

import pytest
from typer.testing import CliRunner

from sqlshelf.infrastructure.kv_store import JsonFileKeyValueStore
from sqlshelf.main import app
from sqlshelf.session import EditorSession
from sqlshelf.snapshot_store import SnapshotStore

runner = CliRunner()

ID_PATTERN = re.compile(r"\((db_[^)]+)\)")


def _make_sqlite_file(path: Path) -> None:
    conn = sqlite3.connect(path)
    try:
        conn.execute("CREATE TABLE items (id INTEGER PRIMARY KEY, label TEXT)")
        conn.executemany("INSERT INTO items (label) VALUES (?)", [("pen",), ("ink",)])
        conn.commit()
    finally:
        conn.close()


def _invoke(*args: str):
    result = runner.invoke(app, list(args))
    assert result.exit_code == 0, result.output
    return result


def _created_id(output: str) -> str:
    match = ID_PATTERN.search(output)
    assert match, output
    return match.group(1)


class TestFileStoreFlow:
    @pytest.mark.asyncio
    async def test_session_changes_visible_to_fresh_store(self, file_store: SnapshotStore, test_settings):
        created = await file_store.create("library")
        async with await EditorSession.open(file_store, created.id) as session:
            await session.run(
                "CREATE TABLE books (title TEXT); INSERT INTO books VALUES ('Dune'), ('Emma');"
            )

        reopened = SnapshotStore(JsonFileKeyValueStore(test_settings.store_path), settings=test_settings)
        async with await EditorSession.open(reopened, created.id) as session:
            report = await session.run("SELECT title FROM books ORDER BY title;")

        assert report.results[0].values == [["Dune"], ["Emma"]]

    @pytest.mark.asyncio
    async def test_import_then_export_returns_same_file(self, file_store: SnapshotStore, tmp_path: Path):
        source = tmp_path / "inventory.sqlite"
        _make_sqlite_file(source)

        record = await file_store.import_file(source)
        await file_store.save(record)
        blob = await file_store.export_blob(record.id)

        assert record.name == "inventory"
        assert blob.filename == "inventory.sqlite"
        assert blob.data == source.read_bytes()

        async with await EditorSession.open(file_store, record.id) as session:
            assert session.handle.list_tables() == ["items"]


class TestCli:
    def test_create_run_and_list(self, cli_env: Path):
        database_id = _created_id(_invoke("create", "shop").output)

        result = _invoke(
            "run",
            database_id,
            "--json",
            "--sql",
            "CREATE TABLE t (id INTEGER); INSERT INTO t VALUES (1); SELECT * FROM t;",
        )
        payload = json.loads(result.stdout)
        assert payload == [
            {"columns": ["Result"], "values": [["Query executed successfully"]], "rowsAffected": 0},
            {"columns": ["Result"], "values": [["Query executed successfully"]], "rowsAffected": 1},
            {"columns": ["id"], "values": [[1]]},
        ]

        listing = _invoke("list").output
        assert "shop" in listing

        tables = _invoke("tables", database_id).output
        assert "- t" in tables

    def test_run_reports_errors_inline(self, cli_env: Path):
        database_id = _created_id(_invoke("create", "broken").output)

        result = _invoke("run", database_id, "--json", "--sql", "SELECT * FROM nonexistent;")

        payload = json.loads(result.stdout)
        assert payload == [{"columns": ["Error"], "values": [["SQL Error: no such table: nonexistent"]]}]

    def test_run_from_file(self, cli_env: Path, tmp_path: Path):
        database_id = _created_id(_invoke("create", "scripted").output)
        script = tmp_path / "seed.sql"
        script.write_text("CREATE TABLE a (x INTEGER);\nINSERT INTO a VALUES (5);\n", encoding="utf-8")

        _invoke("run", database_id, "--file", str(script))
        result = _invoke("run", database_id, "--json", "-q", "SELECT x FROM a;")

        assert json.loads(result.stdout) == [{"columns": ["x"], "values": [[5]]}]

    def test_import_export_delete(self, cli_env: Path, tmp_path: Path):
        source = tmp_path / "warehouse.db"
        _make_sqlite_file(source)

        database_id = _created_id(_invoke("import", str(source)).output)
        target = tmp_path / "out.sqlite"
        _invoke("export", database_id, "--output", str(target))

        assert target.read_bytes() == source.read_bytes()

        _invoke("delete", database_id)
        result = runner.invoke(app, ["export", database_id])
        assert result.exit_code == 1

    def test_export_to_unwritable_path_fails_cleanly(self, cli_env: Path, tmp_path: Path):
        database_id = _created_id(_invoke("create", "stuck").output)

        target = tmp_path / "missing" / "out.sqlite"

        result = runner.invoke(app, ["export", database_id, "--output", str(target)])

        assert result.exit_code == 1
        assert "Failed to write file" in result.output

    def test_run_json_encodes_blobs_as_hex(self, cli_env: Path):
        database_id = _created_id(_invoke("create", "blobs").output)

        result = _invoke("run", database_id, "--json", "--sql", "SELECT x'00ff' AS raw, NULL AS nothing;")

        assert json.loads(result.stdout) == [{"columns": ["raw", "nothing"], "values": [["00ff", None]]}]

    def test_run_prints_profile_summary(self, cli_env: Path):
        database_id = _created_id(_invoke("create", "timed").output)

        output = _invoke("run", database_id, "--sql", "SELECT 1;").output

        assert "Query executed in" in output
        assert "peak memory:" in output

    def test_unknown_database_fails_cleanly(self, cli_env: Path):
        result = runner.invoke(app, ["run", "db_missing", "--sql", "SELECT 1;"])

        assert result.exit_code == 1
        assert "not found" in result.output

    def test_clear_requires_confirmation(self, cli_env: Path):
        _invoke("create", "one")

        refused = runner.invoke(app, ["clear"])
        assert refused.exit_code == 1

        _invoke("clear", "--yes")
        assert "No databases" in _invoke("list").output

    def test_samples_and_info(self, cli_env: Path):
        assert "CREATE TABLE students" in _invoke("samples", "beginner").output
        assert "backend=file" in _invoke("info").output
