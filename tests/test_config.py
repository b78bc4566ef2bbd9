"""Tests for settings validation and environment loading."""

import pytest
from pydantic import ValidationError

from ammsim.config import AppSettings, DayCycleSettings


class TestDayCycleSettings:
    @pytest.mark.parametrize("depth", [0, 30, 40])
    def test_trailing_depth_bounded(self, depth: int) -> None:
        with pytest.raises(ValidationError):
            DayCycleSettings(trailing_depth=depth)

    def test_trailing_depth_from_env_bounded(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAYCYCLE_TRAILING_DEPTH", "40")
        with pytest.raises(ValidationError):
            DayCycleSettings()

    def test_shorter_depth_allowed(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DAYCYCLE_TRAILING_DEPTH", "7")
        assert DayCycleSettings().trailing_depth == 7


class TestAppSettings:
    def test_log_format_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "json")
        assert AppSettings().log_format == "json"

    def test_unknown_log_format_rejected(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("LOG_FORMAT", "xml")
        with pytest.raises(ValidationError):
            AppSettings()
