"""Core primitives: errors, logging and settings.

Tags:
    backup-spine, core, errors, logging, settings
"""

from .errors import (
    BackupExecutorError,
    BackupSpineError,
    BadRequestError,
    ConfigError,
    ConflictError,
    ErrorCategory,
    ErrorContext,
    InstanceNotFoundError,
    InvalidConfigError,
    JobNotRegisteredError,
    OperationInProgressError,
    OrchestrationError,
    ScheduleCancellationError,
    UnprocessableEntityError,
    categorize_error,
    is_conflict,
    is_retryable,
)
from .logging import LogContext, configure_logging, get_logger
from .settings import BackupSettings, clear_settings_cache, get_settings

__all__ = [
    "BackupExecutorError",
    "BackupSpineError",
    "BadRequestError",
    "ConfigError",
    "ConflictError",
    "ErrorCategory",
    "ErrorContext",
    "InstanceNotFoundError",
    "InvalidConfigError",
    "JobNotRegisteredError",
    "OperationInProgressError",
    "OrchestrationError",
    "ScheduleCancellationError",
    "UnprocessableEntityError",
    "categorize_error",
    "is_conflict",
    "is_retryable",
    "LogContext",
    "configure_logging",
    "get_logger",
    "BackupSettings",
    "clear_settings_cache",
    "get_settings",
]
