"""Tests for application configuration."""

import logging

import pytest
from pydantic import ValidationError

from postseason.config import Settings


class TestDefaults:
    def test_defaults(self) -> None:
        settings = Settings()
        assert settings.postseason_play_in_enabled is True
        assert settings.postseason_play_in_day_spacing == 1
        assert settings.postseason_series_day_spacing == 2

    def test_env_override(self, monkeypatch) -> None:
        monkeypatch.setenv("POSTSEASON_PLAY_IN_ENABLED", "false")
        monkeypatch.setenv("POSTSEASON_SERIES_DAY_SPACING", "3")
        settings = Settings()
        assert settings.postseason_play_in_enabled is False
        assert settings.postseason_series_day_spacing == 3


class TestLogLevel:
    def test_log_level_is_normalized(self) -> None:
        settings = Settings(postseason_log_level="debug")
        assert settings.postseason_log_level == "DEBUG"
        assert settings.log_level == logging.DEBUG

    def test_unknown_log_level_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(postseason_log_level="chatty")


class TestSpacing:
    def test_zero_spacing_rejected(self) -> None:
        with pytest.raises(ValidationError):
            Settings(postseason_series_day_spacing=0)
