"""Tests for BackupSettings."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from backup_spine.core.settings import BackupSettings, clear_settings_cache, get_settings


@pytest.fixture(autouse=True)
def _clean_cache():
    clear_settings_cache()
    yield
    clear_settings_cache()


class TestBackupSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("BACKUP_MAX_ATTEMPTS", raising=False)
        settings = BackupSettings(_env_file=None)

        assert settings.retention_period_in_days == 14
        assert settings.max_attempts == 3
        assert settings.reschedule_delay == "10 minutes"
        assert settings.default_retry_delay_minutes == 3
        assert settings.default_backup_interval == "daily"
        assert settings.enable_swarm_manager is False

    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("BACKUP_RETENTION_PERIOD_IN_DAYS", "30")
        monkeypatch.setenv("BACKUP_RESCHEDULE_DELAY", "5 minutes")

        settings = BackupSettings(_env_file=None)

        assert settings.retention_period_in_days == 30
        assert settings.reschedule_delay == "5 minutes"

    @pytest.mark.parametrize(
        "field,value",
        [
            ("max_attempts", 0),
            ("retention_period_in_days", -1),
            ("reschedule_delay", "  "),
            ("log_format", "xml"),
            ("log_level", "verbose"),
        ],
    )
    def test_invalid_values(self, field, value):
        with pytest.raises(ValidationError):
            BackupSettings(_env_file=None, **{field: value})

    def test_get_settings_cached(self):
        assert get_settings() is get_settings()

    def test_force_reload(self, monkeypatch):
        first = get_settings()
        monkeypatch.setenv("BACKUP_MAX_ATTEMPTS", "7")

        reloaded = get_settings(_force_reload=True)

        assert reloaded is not first
        assert reloaded.max_attempts == 7
