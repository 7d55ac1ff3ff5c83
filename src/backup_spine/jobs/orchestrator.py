"""Scheduled backup orchestrator - one tick of a recurring instance backup.

Manifesto:
    A scheduled backup tick has to make three decisions in strict order:
    start (or skip) a backup, prune what has aged out, and retire the
    schedule when the instance is gone. Each decision depends on the
    previous one, and each touches a different remote system, so the
    orchestrator is a straight sequential pipeline with explicit failure
    routing rather than a set of independent handlers.

┌──────────────────────────────────────────────────────────────────────────────┐
│  TICK PIPELINE                                                                │
│                                                                               │
│   run(job)                                                                    │
│     │                                                                         │
│     ├── validate instance_id / backup_type ──► BadRequestError (no calls)    │
│     │                                                                         │
│     ├── InstanceRegistry.find_service_plan                                   │
│     │      └── InstanceNotFoundError ──► instance_deleted = True             │
│     │                                                                         │
│     ├── live: BackupExecutor.start_backup                                    │
│     │      ├── ok ──► start_backup_status = token                            │
│     │      ├── Conflict / Unprocessable ──► ConflictRescheduler              │
│     │      │        └── re-raise original error (with job_state)             │
│     │      └── other ──► propagate                                           │
│     │                                                                         │
│     ├── BackupCleaner.cleanup(job, instance_deleted)                         │
│     │      └── deleted + nothing left ──► ScheduleCancellationGate           │
│     │                                                                         │
│     └── TickResult(status, job)                                              │
└──────────────────────────────────────────────────────────────────────────────┘

Tags:
    backup-spine, orchestrator, scheduled-backup, retention, reschedule

Doc-Types:
    api-reference, architecture-diagram
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from backup_spine.core.errors import (
    BadRequestError,
    ConflictError,
    InstanceNotFoundError,
    UnprocessableEntityError,
)
from backup_spine.core.logging import LogContext, get_logger
from backup_spine.core.settings import BackupSettings, get_settings

from .cancellation import ScheduleCancellationGate
from .models import BackupRunStatus, JobPayload, TickResult
from .protocols import (
    BackupCatalog,
    BackupExecutor,
    InstanceRegistry,
    PlanCatalog,
    ScheduleRegistry,
)
from .reschedule import ConflictRescheduler
from .retention import BackupCleaner

logger = get_logger(__name__)

INSTANCE_DELETED = "instance_deleted"


class BackupJobOrchestrator:
    """Runs one scheduled backup tick for a service instance.

    Stateless between ticks: every per-tick value travels in the job
    payload or the returned result, so a single instance serves all
    scheduled backup jobs.

    Example:
        >>> orchestrator = BackupJobOrchestrator(
        ...     instance_registry=cloud_controller,
        ...     executor=backup_client,
        ...     catalog=backup_store,
        ...     schedule_registry=schedule_manager,
        ...     plan_catalog=catalog,
        ... )
        >>> result = await orchestrator.run(job)
        >>> result.status.start_backup_status
        'started'
    """

    def __init__(
        self,
        instance_registry: InstanceRegistry,
        executor: BackupExecutor,
        catalog: BackupCatalog,
        schedule_registry: ScheduleRegistry,
        plan_catalog: PlanCatalog,
        settings: BackupSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        settings = settings or get_settings()
        clock = clock or (lambda: datetime.now(UTC))

        self.instance_registry = instance_registry
        self.executor = executor
        self.rescheduler = ConflictRescheduler(plan_catalog, settings=settings, clock=clock)
        self.cancellation_gate = ScheduleCancellationGate(schedule_registry)
        self.cleaner = BackupCleaner(
            catalog,
            executor,
            self.cancellation_gate,
            settings=settings,
            clock=clock,
        )

    async def run(self, job: JobPayload) -> TickResult:
        """Run one tick.

        Returns:
            TickResult with the run status and the job state to persist.

        Raises:
            BadRequestError: instance_id or backup_type missing.
            ConflictError / UnprocessableEntityError: another operation is
                running; ``error.job_state`` holds the rescheduled job.
            Exception: any other collaborator failure, unchanged.
        """
        self._validate(job)

        async with LogContext(job_name=job.name, instance_id=job.instance_id):
            logger.info(
                "scheduled_backup.started",
                backup_type=job.backup_type,
                trigger=job.trigger.value,
                attempt=job.attempt,
            )
            status = BackupRunStatus()
            instance_deleted = await self.is_instance_deleted(job.instance_id)

            if instance_deleted:
                status.start_backup_status = INSTANCE_DELETED
            else:
                try:
                    status.start_backup_status = await self.executor.start_backup(
                        job.instance_id,
                        job.backup_type,
                        job.trigger,
                    )
                except (ConflictError, UnprocessableEntityError) as e:
                    logger.error(
                        "scheduled_backup.operation_in_progress",
                        error=str(e),
                    )
                    e.with_job_state(self.rescheduler.reschedule(job))
                    raise

            status.delete_backup_status = await self.cleaner.cleanup(job, instance_deleted)
            logger.info("scheduled_backup.completed", **status.to_dict())
            return TickResult(status=status, job=job)

    async def is_instance_deleted(self, instance_id: str) -> bool:
        """True when the instance registry no longer knows the instance."""
        try:
            await self.instance_registry.find_service_plan(instance_id)
        except InstanceNotFoundError:
            logger.warning("scheduled_backup.instance_deleted", instance_id=instance_id)
            return True
        return False

    @staticmethod
    def _validate(job: JobPayload) -> None:
        missing = [
            name
            for name, value in (("instance_id", job.instance_id), ("type", job.backup_type))
            if not value
        ]
        if missing:
            logger.error(
                "scheduled_backup.bad_request",
                job_name=job.name,
                missing_fields=missing,
            )
            raise BadRequestError(
                "Scheduled backup cannot be initiated as the required mandatory "
                f"params ({' | '.join(missing)}) are empty",
                missing_fields=missing,
            ).with_context(job_name=job.name, instance_id=job.instance_id)
