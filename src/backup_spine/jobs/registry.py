"""Job Registry: injectable job type → service lookup.

Manifesto:
Every recurring job of a given type shares one behaviour, so each job type
maps to a single stateless service object registered once. Per-tick data is
passed to the service as parameters, never stored on it.

ARCHITECTURE
────────────
::

    JobRegistry
      ├── .register(job_type, service)   ─ store service
      ├── .get(job_type)                 ─ lookup by key
      ├── .has(job_type)                 ─ existence check
      ├── .list_job_types()              ─ all registered keys
      └── .unregister(job_type)

    get_default_registry()     ─ module-level singleton
    reset_default_registry()   ─ clear for testing

Tags:
    backup-spine, jobs, registry, lookup
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from backup_spine.core.errors import JobNotRegisteredError

from .models import JobPayload, JobType, TickResult


@runtime_checkable
class JobService(Protocol):
    """A stateless per-job-type service, e.g. BackupJobOrchestrator."""

    async def run(self, job: JobPayload) -> TickResult:
        ...


class JobRegistry:
    """Injectable job service registry.

    Example:
        >>> registry = JobRegistry()
        >>> registry.register(JobType.SCHEDULED_BACKUP, orchestrator)
        >>> registry.get(JobType.SCHEDULED_BACKUP) is orchestrator
        True
    """

    def __init__(self):
        self._services: dict[JobType, JobService] = {}

    def register(self, job_type: JobType, service: JobService) -> None:
        """Register the service for a job type, replacing any previous one."""
        self._services[JobType(job_type)] = service

    def get(self, job_type: JobType) -> JobService:
        """Get the service for a job type.

        Raises:
            JobNotRegisteredError: If no service is registered
        """
        try:
            return self._services[JobType(job_type)]
        except (KeyError, ValueError):
            raise JobNotRegisteredError(
                str(getattr(job_type, "value", job_type)),
                available=[t.value for t in self.list_job_types()],
            ) from None

    def has(self, job_type: JobType) -> bool:
        return job_type in self._services

    def list_job_types(self) -> list[JobType]:
        return sorted(self._services, key=lambda t: t.value)

    def unregister(self, job_type: JobType) -> bool:
        """Unregister a service; False if none was registered."""
        return self._services.pop(job_type, None) is not None

    def clear(self) -> None:
        """Clear all services (for testing)."""
        self._services.clear()


# === GLOBAL DEFAULT REGISTRY ===

_default_registry: JobRegistry | None = None


def get_default_registry() -> JobRegistry:
    """Get the global default registry, creating it on first access."""
    global _default_registry
    if _default_registry is None:
        _default_registry = JobRegistry()
    return _default_registry


def reset_default_registry() -> None:
    """Drop the global default registry (for testing)."""
    global _default_registry
    _default_registry = None
