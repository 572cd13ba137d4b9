"""Mini README: Runtime configuration for the income tracker core.

Structure:
    * IncomeTrackerSettings - Pydantic settings model read from the environment.
    * get_settings - cached accessor so validation happens once per process.

Usage:
    Variables use the ``INCOMETRACKER_`` prefix (``INCOMETRACKER_DATABASE_URL``,
    ``INCOMETRACKER_LOG_LEVEL`` ...) and may also be placed in a ``.env`` file.
    When no database URL is configured the ledger lives in a SQLite file
    inside ``data_directory``.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DATABASE_FILENAME = "incometracker.db"


class IncomeTrackerSettings(BaseSettings):
    """Settings shared by the record store, price catalog and logging."""

    model_config = SettingsConfigDict(
        env_prefix="INCOMETRACKER_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        "development",
        description="Environment label, used only for log context.",
    )
    data_directory: Path = Field(
        Path("data"),
        description="Directory holding the default SQLite database file.",
    )
    database_url: Optional[str] = Field(
        None,
        description=(
            "SQLAlchemy URL of the ledger database. Leave unset to use a SQLite"
            " file inside data_directory; use 'sqlite://' for an in-memory ledger."
        ),
    )
    log_level: str = Field("INFO", description="Root logging level name.")
    echo_sql: bool = Field(False, description="Echo SQL statements emitted by SQLAlchemy.")

    @field_validator("data_directory", mode="before")
    @classmethod
    def _expand_path(cls, value: object) -> Path:
        """Expand user directories and make sure the directory exists."""

        path = Path(str(value)).expanduser().resolve()
        path.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        normalised = value.strip().upper()
        if not isinstance(logging.getLevelName(normalised), int):
            raise ValueError(f"Unknown log level: {value}")
        return normalised

    def resolved_database_url(self) -> str:
        """Return the configured URL or the default SQLite file location."""

        if self.database_url:
            return self.database_url
        return f"sqlite:///{self.data_directory / DATABASE_FILENAME}"


@lru_cache()
def get_settings() -> IncomeTrackerSettings:
    """Return cached settings, ensuring consistent configuration across modules."""

    return IncomeTrackerSettings()
