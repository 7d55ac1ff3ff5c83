"""Tests for structured logging setup."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from backup_spine.core.logging import (
    LogContext,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)
from backup_spine.core.settings import BackupSettings


@pytest.fixture(autouse=True)
def _reset_structlog():
    yield
    clear_context()
    structlog.reset_defaults()


class TestConfigureLogging:
    def test_json_output_is_ecs_compatible(self, caplog):
        caplog.set_level(logging.INFO)
        configure_logging(level="INFO", json_format=True, service="backup-test")
        logger = get_logger("test.json")

        logger.info("scheduled_backup.started", instance_id="inst-1")

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["event"] == "scheduled_backup.started"
        assert payload["instance_id"] == "inst-1"
        assert payload["service.name"] == "backup-test"
        assert payload["log.level"] == "info"
        assert "@timestamp" in payload

    def test_bound_context_is_rendered(self, caplog):
        caplog.set_level(logging.INFO)
        configure_logging(level="INFO", json_format=True)
        logger = get_logger("test.bound")

        with LogContext(job_name="j-1"):
            logger.info("inside")

        payload = json.loads(caplog.records[-1].getMessage())
        assert payload["job_name"] == "j-1"

    def test_level_filters(self, caplog):
        caplog.set_level(logging.INFO)
        configure_logging(level="WARNING", json_format=True)
        logger = get_logger("test.level")

        logger.info("dropped")

        assert not any("dropped" in record.getMessage() for record in caplog.records)


class TestConfigureFromSettings:
    """Test level and format defaults taken from BackupSettings."""

    def test_console_format_from_environment(self, caplog, monkeypatch):
        """BACKUP_LOG_FORMAT=console renders key/value text, not JSON."""
        monkeypatch.setenv("BACKUP_LOG_FORMAT", "console")
        caplog.set_level(logging.INFO)
        configure_logging()
        logger = get_logger("test.console")

        logger.info("scheduled_backup.started", instance_id="inst-1")

        message = caplog.records[-1].getMessage()
        assert "scheduled_backup.started" in message
        assert "inst-1" in message
        with pytest.raises(json.JSONDecodeError):
            json.loads(message)

    def test_json_format_from_settings(self, caplog):
        caplog.set_level(logging.INFO)
        configure_logging(settings=BackupSettings(_env_file=None, log_format="json"))
        logger = get_logger("test.settings_json")

        logger.info("scheduled_backup.started")

        assert json.loads(caplog.records[-1].getMessage())["event"] == "scheduled_backup.started"

    def test_level_from_settings(self, caplog):
        caplog.set_level(logging.INFO)
        configure_logging(settings=BackupSettings(_env_file=None, log_level="warning"))
        logger = get_logger("test.settings_level")

        logger.info("dropped")
        logger.warning("kept")

        messages = [record.getMessage() for record in caplog.records]
        assert not any("dropped" in m for m in messages)
        assert any("kept" in m for m in messages)

    def test_explicit_arguments_win(self, caplog):
        """Explicit json_format overrides a console setting."""
        caplog.set_level(logging.INFO)
        configure_logging(
            json_format=True,
            settings=BackupSettings(_env_file=None, log_format="console"),
        )
        logger = get_logger("test.override")

        logger.info("scheduled_backup.started")

        assert json.loads(caplog.records[-1].getMessage())["event"] == "scheduled_backup.started"


class TestLogContext:
    def test_binds_and_unbinds(self):
        with LogContext(job_name="j-1", instance_id="inst-1"):
            assert structlog.contextvars.get_contextvars() == {
                "job_name": "j-1",
                "instance_id": "inst-1",
            }

        assert structlog.contextvars.get_contextvars() == {}

    @pytest.mark.asyncio
    async def test_async_context(self):
        async with LogContext(job_name="j-2"):
            assert structlog.contextvars.get_contextvars()["job_name"] == "j-2"

        assert "job_name" not in structlog.contextvars.get_contextvars()

    def test_bind_unbind(self):
        bind_context(tenant_id="space-1")
        assert structlog.contextvars.get_contextvars()["tenant_id"] == "space-1"

        unbind_context("tenant_id")
        assert structlog.contextvars.get_contextvars() == {}
