"""
Centralized settings for backup-spine.

Manifesto:
    Retry ceilings, retry delays and retention windows are operator
    decisions, not code decisions. ``BackupSettings`` gathers them into one
    validated, cached object read from ``BACKUP_*`` environment variables and
    ``.env`` files, so the job document only overrides what it must.

Fields
──────
retention_period_in_days    : Backups older than this are cleanup candidates
max_attempts                : Conflict retries per cycle before giving up
reschedule_delay            : Offset of the retry fire, e.g. "10 minutes"
default_retry_delay_minutes : Offset used when reschedule_delay is not minutes
default_backup_interval     : Plan frequency used when the plan names none
enable_swarm_manager        : Allow the docker instance-manager backend
log_level / log_format      : defaults for configure_logging()

Tags:
    backup-spine, configuration, settings, pydantic, caching, validation
"""

from __future__ import annotations

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BackupSettings(BaseSettings):
    """backup-spine configuration.

    All fields can be set via ``BACKUP_*`` environment variables (e.g.
    ``BACKUP_RETENTION_PERIOD_IN_DAYS=30``) or through a ``.env`` file.
    """

    model_config = SettingsConfigDict(
        env_prefix="BACKUP_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Retention ────────────────────────────────────────────────
    retention_period_in_days: int = Field(default=14, gt=0)

    # ── Scheduled backup retries ─────────────────────────────────
    max_attempts: int = Field(default=3, gt=0)
    reschedule_delay: str = Field(default="10 minutes")
    default_retry_delay_minutes: int = Field(default=3, gt=0)
    default_backup_interval: str = Field(default="daily")

    # ── Instance managers ────────────────────────────────────────
    enable_swarm_manager: bool = Field(default=False)

    # ── Logging ──────────────────────────────────────────────────
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json")

    @field_validator("reschedule_delay", "default_backup_interval")
    @classmethod
    def _not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be blank")
        return value.strip()

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, value: str) -> str:
        if value not in ("json", "console"):
            raise ValueError("log_format must be 'json' or 'console'")
        return value

    @field_validator("log_level")
    @classmethod
    def _known_level(cls, value: str) -> str:
        level = value.strip().upper()
        if level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"unknown log level: {value!r}")
        return level


# ── Settings factory with caching ────────────────────────────────────────

_settings_cache: dict[str, BackupSettings] = {}


def get_settings(*, _force_reload: bool = False) -> BackupSettings:
    """Load, validate, and cache a :class:`BackupSettings` instance."""
    if _force_reload or "default" not in _settings_cache:
        _settings_cache["default"] = BackupSettings()
    return _settings_cache["default"]


def clear_settings_cache() -> None:
    """Drop the cached settings (for testing)."""
    _settings_cache.clear()


__all__ = [
    "BackupSettings",
    "get_settings",
    "clear_settings_cache",
]
