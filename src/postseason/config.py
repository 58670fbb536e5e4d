"""Application settings via pydantic-settings. Loads from environment and .env file."""

from __future__ import annotations

import logging

from pydantic import model_validator
from pydantic_settings import BaseSettings

VALID_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


class Settings(BaseSettings):
    """Postseason engine configuration.

    All values can be overridden via environment variables or .env file.
    """

    # Environment
    postseason_env: str = "development"

    # Tournament format
    postseason_play_in_enabled: bool = True

    # Scheduling: days between consecutive games handed to the calendar
    postseason_play_in_day_spacing: int = 1
    postseason_series_day_spacing: int = 2

    # Persistence
    postseason_snapshot_path: str = "postseason_snapshot.yaml"

    # Logging
    postseason_log_level: str = "INFO"

    model_config = {"env_prefix": "", "env_file": ".env", "extra": "ignore"}

    @model_validator(mode="after")
    def _normalize_log_level(self) -> Settings:
        """Upper-case the log level and reject names logging does not know."""
        level = self.postseason_log_level.upper()
        if level not in VALID_LOG_LEVELS:
            msg = (
                f"POSTSEASON_LOG_LEVEL must be one of {sorted(VALID_LOG_LEVELS)}, "
                f"got {self.postseason_log_level!r}"
            )
            raise ValueError(msg)
        self.postseason_log_level = level
        return self

    @model_validator(mode="after")
    def _check_spacing(self) -> Settings:
        if self.postseason_play_in_day_spacing < 1 or self.postseason_series_day_spacing < 1:
            raise ValueError("Game day spacing must be at least 1 day")
        return self

    @property
    def log_level(self) -> int:
        """Numeric level for ``logging.basicConfig``."""
        return getattr(logging, self.postseason_log_level, logging.INFO)
