"""Scheduled job runner - loads, runs and persists one job tick.

The runner is the job-runner seam around the stateless job services: it
owns the job documents and the run-lock. Services return the job state to
persist (or attach it to the error they raise); the runner writes it back.

    run_tick(name)
      ├── lock_manager.acquire(name) ── held ──► skipped
      ├── store.get(name)
      ├── registry.get(job.job_type).run(job)
      │     ├── ok     ──► store.save(result.job)
      │     └── error  ──► store.save(error.job_state) if attached
      └── lock_manager.release(name)   (always)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from backup_spine.core.errors import BackupSpineError
from backup_spine.core.logging import get_logger

from .models import BackupRunStatus, JobPayload
from .protocols import JobStore, LockManager
from .registry import JobRegistry, get_default_registry

logger = get_logger(__name__)


@dataclass
class RunnerStats:
    """Statistics for the job runner."""

    ticks: int = 0
    succeeded: int = 0
    failed: int = 0
    skipped: int = 0
    last_tick: datetime | None = None
    last_error: str | None = None


@dataclass
class TickRecord:
    """What the runner reports for one tick."""

    job_name: str
    succeeded: bool
    skipped: bool = False
    status: BackupRunStatus | None = None
    error: dict[str, Any] | None = None
    started_at: datetime = field(default_factory=lambda: datetime.now(UTC))
    finished_at: datetime | None = None


class InMemoryJobStore:
    """In-process job store keyed by job name."""

    def __init__(self, jobs: list[JobPayload] | None = None):
        self._jobs: dict[str, JobPayload] = {job.name: job for job in jobs or []}

    async def get(self, name: str) -> JobPayload:
        try:
            return self._jobs[name]
        except KeyError:
            raise KeyError(f"Job not found: {name}") from None

    async def save(self, job: JobPayload) -> None:
        self._jobs[job.name] = job

    def snapshot(self, name: str) -> JobPayload | None:
        return self._jobs.get(name)


class InMemoryLockManager:
    """In-process run-lock keyed by job name."""

    def __init__(self):
        self._held: set[str] = set()
        self._guard = asyncio.Lock()

    async def acquire(self, name: str) -> bool:
        async with self._guard:
            if name in self._held:
                return False
            self._held.add(name)
            return True

    async def release(self, name: str) -> None:
        async with self._guard:
            self._held.discard(name)

    def is_locked(self, name: str) -> bool:
        return name in self._held


class ScheduledJobRunner:
    """Runs job ticks against the registered job services.

    Example:
        >>> runner = ScheduledJobRunner(store, registry)
        >>> record = await runner.run_tick("abc-123_ScheduledBackup")
        >>> record.succeeded
        True
    """

    def __init__(
        self,
        store: JobStore,
        registry: JobRegistry | None = None,
        lock_manager: LockManager | None = None,
    ) -> None:
        self.store = store
        self.registry = registry or get_default_registry()
        self.lock_manager = lock_manager or InMemoryLockManager()
        self._stats = RunnerStats()

    async def run_tick(self, job_name: str) -> TickRecord:
        """Run one tick of ``job_name``; failures are captured, not raised."""
        self._stats.ticks += 1
        self._stats.last_tick = datetime.now(UTC)

        if not await self.lock_manager.acquire(job_name):
            logger.debug("job_runner.locked", job_name=job_name)
            self._stats.skipped += 1
            return TickRecord(job_name=job_name, succeeded=False, skipped=True)

        record = TickRecord(job_name=job_name, succeeded=False)
        try:
            job = await self.store.get(job_name)
            service = self.registry.get(job.job_type)
            result = await service.run(job)
            await self.store.save(result.job)
            record.succeeded = True
            record.status = result.status
            self._stats.succeeded += 1
            logger.info("job_runner.succeeded", job_name=job_name)

        except BackupSpineError as e:
            if e.job_state is not None:
                await self.store.save(e.job_state)
            self._record_failure(record, e, e.to_dict())

        except Exception as e:
            self._record_failure(record, e, {"error_type": type(e).__name__, "message": str(e)})

        finally:
            await self.lock_manager.release(job_name)
            record.finished_at = datetime.now(UTC)

        return record

    def _record_failure(self, record: TickRecord, error: Exception, details: dict[str, Any]) -> None:
        record.error = details
        self._stats.failed += 1
        self._stats.last_error = str(error)
        logger.error("job_runner.failed", job_name=record.job_name, **details)

    def get_stats(self) -> RunnerStats:
        return self._stats

    def reset_stats(self) -> None:
        self._stats = RunnerStats()
