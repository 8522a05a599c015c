"""
Configuration settings for sqlshelf.

Uses Pydantic Settings to load environment variables for the snapshot store
backend, export naming, and logging.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Snapshot store
    store_backend: Literal["file", "memory"] = Field("file", alias="SQLSHELF_STORE_BACKEND")
    store_dir: Path = Field(Path(".sqlshelf"), alias="SQLSHELF_STORE_DIR")
    store_name: str = Field("databases", alias="SQLSHELF_STORE_NAME")

    # Export
    export_extension: str = Field(".sqlite", alias="SQLSHELF_EXPORT_EXTENSION")
    export_media_type: str = Field("application/x-sqlite3", alias="SQLSHELF_EXPORT_MEDIA_TYPE")

    # Application
    app_env: str = Field("development", alias="APP_ENV")
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    log_json: bool = Field(False, alias="LOG_JSON")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )

    @property
    def store_path(self) -> Path:
        """Directory holding one JSON document per stored database."""
        return self.store_dir / self.store_name


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
