"""
Tests for settings validation and structured logging.
"""
import json
import logging
from pathlib import Path
from zoneinfo import ZoneInfo

import pytest
from pydantic import ValidationError

from health_engine.core.config import DEFAULT_TABLES_PATH, Settings
from health_engine.core.logging_config import (
    JSONFormatter,
    RequestIdFilter,
    clear_request_id,
    get_request_id,
    set_request_id,
)


# =============================================================================
# SETTINGS
# =============================================================================

class TestSettings:
    """Tests for Settings validation."""

    def test_defaults(self, test_settings):
        assert test_settings.timezone == ZoneInfo("UTC")
        assert test_settings.health_engine_window_days == 21
        assert test_settings.health_engine_dose_horizon_days == 30
        assert test_settings.health_engine_regeneration_buffer_days == 7
        assert test_settings.tables_path == DEFAULT_TABLES_PATH

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("HEALTH_ENGINE_TIMEZONE", "Europe/London")
        monkeypatch.setenv("HEALTH_ENGINE_WINDOW_DAYS", "14")

        settings = Settings(_env_file=None)

        assert settings.timezone == ZoneInfo("Europe/London")
        assert settings.health_engine_window_days == 14

    def test_unknown_timezone_is_rejected(self):
        with pytest.raises(ValidationError, match="HEALTH_ENGINE_TIMEZONE"):
            Settings(health_engine_timezone="Mars/Olympus_Mons", _env_file=None)

    def test_non_positive_days_are_rejected(self):
        with pytest.raises(ValidationError, match="HEALTH_ENGINE_DOSE_HORIZON_DAYS"):
            Settings(health_engine_dose_horizon_days=0, _env_file=None)

    def test_missing_tables_file_is_rejected(self, tmp_path):
        with pytest.raises(ValidationError, match="HEALTH_ENGINE_TABLES_PATH"):
            Settings(health_engine_tables_path=str(tmp_path / "nope.yaml"), _env_file=None)

    def test_log_format_is_validated(self):
        with pytest.raises(ValidationError, match="LOG_FORMAT"):
            Settings(log_format="xml", _env_file=None)

    def test_custom_tables_path(self, tmp_path):
        path = tmp_path / "tables.yaml"
        path.write_text(DEFAULT_TABLES_PATH.read_text(encoding="utf-8"), encoding="utf-8")

        settings = Settings(health_engine_tables_path=str(path), _env_file=None)

        assert settings.tables_path == Path(path)


# =============================================================================
# LOGGING
# =============================================================================

class TestJSONFormatter:
    """Tests for single-line JSON log output."""

    def _record(self, **extra):
        record = logging.LogRecord(
            name="health_engine.services.streak_tracker",
            level=logging.INFO,
            pathname=__file__,
            lineno=1,
            msg="Streak calculated",
            args=(),
            exc_info=None,
        )
        for key, value in extra.items():
            setattr(record, key, value)
        return record

    def test_basic_fields(self):
        entry = json.loads(JSONFormatter().format(self._record()))

        assert entry["level"] == "INFO"
        assert entry["logger"] == "health_engine.services.streak_tracker"
        assert entry["message"] == "Streak calculated"
        assert entry["timestamp"].endswith("Z")
        assert "request_id" not in entry

    def test_extra_fields(self):
        entry = json.loads(JSONFormatter().format(self._record(current=3, longest=5)))

        assert entry["extra"] == {"current": 3, "longest": 5}

    def test_request_id(self):
        set_request_id("abc12345")
        try:
            entry = json.loads(JSONFormatter().format(self._record()))
        finally:
            clear_request_id()

        assert entry["request_id"] == "abc12345"
        assert get_request_id() is None

    def test_filter_stamps_records(self):
        record = self._record()
        set_request_id("feedbeef")
        try:
            assert RequestIdFilter().filter(record) is True
        finally:
            clear_request_id()

        assert record.request_id == "feedbeef"
        entry = json.loads(JSONFormatter().format(record))
        assert entry["request_id"] == "feedbeef"
        assert "request_id" not in entry.get("extra", {})

    def test_filter_without_request(self):
        record = self._record()
        RequestIdFilter().filter(record)

        assert record.request_id == "-"
        assert "request_id" not in json.loads(JSONFormatter().format(record))
