"""Configuration management using pydantic-settings.

Provides validated configuration with support for:
- JSON config file (config.json)
- STACKDUMP_* environment variables
- Type coercion and validation
"""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from stackdump.db.engine import sqlite_url


DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_USER_AGENT = "stackdump/0.1 (+https://archive.org/details/stackexchange)"
DATABASE_FILE_NAME = "stackdump.db"


class AppSettings(BaseSettings):
    """Application settings with validation.

    Values come from the JSON config file when present; environment
    variables prefixed with ``STACKDUMP_`` fill in anything the file omits.
    """

    data_path: Path = Path("./data")
    site_list: Path | None = None
    database_url: str = ""
    max_concurrent_jobs: int = Field(default=3, ge=1)
    download_chunk_size: int = Field(default=1024 * 1024, ge=1)
    insert_batch_size: int = Field(default=10_000, ge=1)
    http_timeout: float | None = None
    user_agent: str = DEFAULT_USER_AGENT
    archive_extension: str = ".7z"

    model_config = SettingsConfigDict(
        env_prefix="STACKDUMP_",
        extra="ignore",
    )

    @field_validator("archive_extension")
    @classmethod
    def ensure_leading_dot(cls, v: str) -> str:
        """Accept "7z" as well as ".7z"."""
        return v if v.startswith(".") else f".{v}"

    def resolved_database_url(self) -> str:
        """Database URL, defaulting to a SQLite file under data_path."""
        if self.database_url:
            return self.database_url
        return sqlite_url(self.data_path / DATABASE_FILE_NAME)

    @classmethod
    def from_json(cls, path: str | Path = DEFAULT_CONFIG_PATH) -> "AppSettings":
        """Load settings from a JSON config file.

        Args:
            path: Path to the JSON config file

        Returns:
            AppSettings instance with validated configuration
        """
        config_path = Path(path)
        if config_path.exists():
            with open(config_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return cls(**data)
        return cls()


@lru_cache
def get_settings(config_path: str = DEFAULT_CONFIG_PATH) -> AppSettings:
    """Get cached application settings.

    Args:
        config_path: Path to JSON config file (default: config.json)

    Returns:
        Cached AppSettings instance
    """
    return AppSettings.from_json(config_path)


def load_config(path: str | Path = DEFAULT_CONFIG_PATH) -> AppSettings:
    """Load configuration from file, bypassing the cache."""
    get_settings.cache_clear()
    return AppSettings.from_json(path)
