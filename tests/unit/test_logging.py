from __future__ import annotations

import json
import logging

from sqlshelf.utils.logging import _json_formatter

EXPECTED_BYTES = 4096


def _record() -> logging.LogRecord:
    return logging.LogRecord(
        name="test.logger",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg="hello",
        args=(),
        exc_info=None,
    )


def test_json_formatter_promotes_standard_extra_fields() -> None:
    record = _record()
    record.snapshot_bytes = EXPECTED_BYTES
    record.database_id = "db_1"

    payload = json.loads(_json_formatter(record))

    assert payload["level"] == "INFO"
    assert payload["logger"] == "test.logger"
    assert payload["message"] == "hello"
    assert payload["snapshot_bytes"] == EXPECTED_BYTES
    assert payload["database_id"] == "db_1"
    assert "pathname" not in payload


def test_json_formatter_supports_legacy_nested_extra_field() -> None:
    record = _record()
    record.extra = {"snapshot_bytes": EXPECTED_BYTES}

    payload = json.loads(_json_formatter(record))

    assert payload["snapshot_bytes"] == EXPECTED_BYTES


def test_json_formatter_renders_unserializable_values_as_text() -> None:
    record = _record()
    record.path = object()

    payload = json.loads(_json_formatter(record))

    assert isinstance(payload["path"], str)
