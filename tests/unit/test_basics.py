from pathlib import Path
from time import sleep

import pytest

from sqlshelf import config
from sqlshelf.samples import SAMPLE_QUERIES, sample_levels, samples_for
from sqlshelf.session import split_statements
from sqlshelf.utils import profiler

SLEEP_SECONDS = 0.05


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.chdir(tmp_path)
    for name in ("SQLSHELF_STORE_BACKEND", "SQLSHELF_STORE_DIR", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)

    settings = config.Settings()

    assert settings.store_backend == "file"
    assert settings.store_path == Path(".sqlshelf") / "databases"
    assert settings.export_extension == ".sqlite"
    assert settings.export_media_type == "application/x-sqlite3"
    assert settings.log_level == "INFO"


def test_settings_read_environment(monkeypatch: pytest.MonkeyPatch, tmp_path: Path):
    monkeypatch.setenv("SQLSHELF_STORE_BACKEND", "memory")
    monkeypatch.setenv("SQLSHELF_STORE_DIR", str(tmp_path))

    settings = config.Settings()

    assert settings.store_backend == "memory"
    assert settings.store_dir == tmp_path


def test_profile_block_measures_time():
    with profiler.profile_block("sleep") as stats:
        sleep(SLEEP_SECONDS)
    assert stats.duration_seconds >= SLEEP_SECONDS
    assert stats.duration_ms == pytest.approx(stats.duration_seconds * 1000)
    assert stats.peak_rss_bytes is None or stats.peak_rss_bytes > 0


def test_samples_are_single_statements():
    assert sample_levels() == ["beginner", "intermediate", "advanced"]
    for level in SAMPLE_QUERIES:
        for statement in samples_for(level):
            assert split_statements(statement) == [statement]


def test_unknown_sample_level():
    with pytest.raises(ValueError, match="Unknown level"):
        samples_for("expert")


def test_samples_run_in_order(handle):
    script = [s for level in sample_levels() for s in samples_for(level)]

    results = handle.execute_batch(script)

    assert len(results) == len(script)
    assert not any(result.is_error for result in results)
