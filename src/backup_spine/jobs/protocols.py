"""Collaborator protocols for the scheduled backup tick.

┌──────────────────────────────────────────────────────────────────────────────┐
│  COLLABORATOR CONTRACTS                                                       │
│                                                                               │
│  The backup tick spans four independent remote systems with no shared        │
│  transaction. Each is reached only through the protocol below, injected      │
│  at construction time, so the tick logic never imports a transport.         │
│                                                                               │
│   ┌──────────────────┐  find_service_plan   ┌────────────────────────┐       │
│   │ InstanceRegistry │ ◄─────────────────── │                        │       │
│   └──────────────────┘                      │                        │       │
│   ┌──────────────────┐  start / delete      │  BackupJobOrchestrator │       │
│   │ BackupExecutor   │ ◄─────────────────── │                        │       │
│   └──────────────────┘                      │  ConflictRescheduler   │       │
│   ┌──────────────────┐  list backups        │  BackupCleaner         │       │
│   │ BackupCatalog    │ ◄─────────────────── │  CancellationGate      │       │
│   └──────────────────┘                      │                        │       │
│   ┌──────────────────┐  cancel_schedule     │                        │       │
│   │ ScheduleRegistry │ ◄─────────────────── │                        │       │
│   └──────────────────┘                      └────────────────────────┘       │
│   ┌──────────────────┐  get_backup_interval (sync, local catalog)            │
│   │ PlanCatalog      │                                                        │
│   └──────────────────┘                                                        │
│                                                                               │
│  Remote calls are async; each is one logical attempt per tick. Retries and   │
│  timeouts belong to the transport behind the protocol.                        │
└──────────────────────────────────────────────────────────────────────────────┘
"""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from typing import Any, Protocol, runtime_checkable

from .models import BackupRecord, BackupTrigger, JobPayload, JobType


@runtime_checkable
class InstanceRegistry(Protocol):
    """Service instance registry (e.g. the platform's cloud controller)."""

    async def find_service_plan(self, instance_id: str) -> Any:
        """Return the instance's plan.

        Raises:
            InstanceNotFoundError: the instance no longer exists.
        """
        ...


@runtime_checkable
class BackupExecutor(Protocol):
    """Service that physically starts and deletes backups."""

    async def start_backup(
        self,
        instance_id: str,
        backup_type: str,
        trigger: BackupTrigger,
    ) -> str:
        """Start a backup and return a status token.

        Raises:
            ConflictError / UnprocessableEntityError: another operation
                is already running for the instance.
        """
        ...

    async def delete_backup(self, backup_guid: str, tenant_id: str | None) -> None:
        """Delete one backup."""
        ...


@runtime_checkable
class BackupCatalog(Protocol):
    """Read-only view over backup metadata."""

    async def list_backups_older_than(
        self,
        instance_id: str,
        tenant_id: str | None,
        retention_days: int,
    ) -> Sequence[BackupRecord]:
        """Backups started on or before the retention boundary day."""
        ...

    async def list_backup_filenames(
        self,
        instance_id: str,
        tenant_id: str | None,
        before: datetime,
    ) -> Sequence[str]:
        """Backup artifacts remaining for the instance as of ``before``."""
        ...


@runtime_checkable
class ScheduleRegistry(Protocol):
    """Registry of recurring job schedules."""

    async def cancel_schedule(self, instance_id: str, job_type: JobType) -> None:
        ...


@runtime_checkable
class PlanCatalog(Protocol):
    """Local service catalog."""

    def get_backup_interval(self, plan_id: str | None) -> str | None:
        """Nominal backup frequency token of a plan (``daily``, ``hourly``, ...)."""
        ...


@runtime_checkable
class JobStore(Protocol):
    """Durable store of job documents, owned by the job runner."""

    async def get(self, name: str) -> JobPayload:
        ...

    async def save(self, job: JobPayload) -> None:
        ...


@runtime_checkable
class LockManager(Protocol):
    """Run-lock guarding concurrent ticks of the same job."""

    async def acquire(self, name: str) -> bool:
        ...

    async def release(self, name: str) -> None:
        ...
