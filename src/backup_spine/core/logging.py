"""
Backup-Spine Logging - structured logging for scheduled backup ticks.

Manifesto:
    A backup tick touches four remote systems with no shared transaction.
    When something goes wrong, the only record of which step did what is the
    log stream, so every line is structured and carries the job and instance
    it belongs to.

    - **Structures:** JSON output for log aggregation (ELK, etc.)
    - **Correlates:** job_name, instance_id propagation via contextvars
    - **Flexes:** Console output for development, JSON for production

Architecture:
    ::

        configure_logging(settings=BackupSettings())   # BACKUP_LOG_LEVEL, BACKUP_LOG_FORMAT
            ↓
        structlog processor chain:
          1. TimeStamper
          2. merge_contextvars / add_log_level / add_logger_name
          3. add_service_metadata
          4. elasticsearch_compatible (JSON only)
          5. JSONRenderer (or ConsoleRenderer for dev)

Examples:
    >>> from backup_spine.core.logging import configure_logging, get_logger
    >>> configure_logging(level="INFO", json_format=True)
    >>> logger = get_logger(__name__)
    >>> logger.info("scheduled_backup.started", instance_id="abc-123")

Tags:
    logging, structlog, observability, elasticsearch, ecs, backup-spine
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from backup_spine.core.settings import BackupSettings, get_settings

# Store service name for metadata
_SERVICE_NAME = "backup-spine"


def _add_service_metadata(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add service-level metadata to all logs."""
    event_dict.setdefault("service.name", _SERVICE_NAME)
    return event_dict


def _elasticsearch_compatible(
    logger: WrappedLogger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Make field names Elasticsearch/ECS compatible."""
    if "timestamp" in event_dict:
        event_dict["@timestamp"] = event_dict.pop("timestamp")

    if "level" in event_dict:
        event_dict["log.level"] = event_dict.pop("level")

    return event_dict


def configure_logging(
    level: str | None = None,
    json_format: bool | None = None,
    service: str = "backup-spine",
    add_timestamp: bool = True,
    settings: BackupSettings | None = None,
) -> None:
    """Configure structured logging for the application.

    Arguments left as None are taken from ``settings`` (``BACKUP_LOG_LEVEL``
    and ``BACKUP_LOG_FORMAT``).

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR)
        json_format: True for JSON, False for console
        service: Service name to include in logs
        add_timestamp: Include ISO timestamp in logs
        settings: Source of the defaults; ``get_settings()`` when omitted
    """
    global _SERVICE_NAME
    _SERVICE_NAME = service

    if level is None or json_format is None:
        settings = settings or get_settings()
        if level is None:
            level = settings.log_level
        if json_format is None:
            json_format = settings.log_format == "json"

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        _add_service_metadata,
    ]

    if add_timestamp:
        shared_processors.insert(0, structlog.processors.TimeStamper(fmt="iso"))

    if json_format:
        shared_processors.append(structlog.processors.format_exc_info)
        shared_processors.append(_elasticsearch_compatible)
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=True)

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper()),
    )


def get_logger(name: str | None = None) -> Any:
    """Get a structured logger.

    Args:
        name: Logger name (usually __name__)
    """
    return structlog.get_logger(name)


def bind_context(**kwargs: Any) -> None:
    """Bind context to include in all subsequent logs."""
    structlog.contextvars.bind_contextvars(**kwargs)


def unbind_context(*keys: str) -> None:
    """Remove specific keys from logging context."""
    structlog.contextvars.unbind_contextvars(*keys)


def clear_context() -> None:
    """Clear all bound context."""
    structlog.contextvars.clear_contextvars()


class LogContext:
    """Context manager for scoped logging context.

    Example:
        async with LogContext(job_name="abc-123_scheduled_backup", instance_id="abc-123"):
            logger.info("scheduled_backup.started")
        # Context cleared here
    """

    def __init__(self, **kwargs: Any):
        self._context = kwargs

    def __enter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    def __exit__(self, *args) -> None:
        unbind_context(*self._context.keys())

    async def __aenter__(self) -> LogContext:
        bind_context(**self._context)
        return self

    async def __aexit__(self, *args) -> None:
        unbind_context(*self._context.keys())


__all__ = [
    "configure_logging",
    "get_logger",
    "bind_context",
    "unbind_context",
    "clear_context",
    "LogContext",
]
