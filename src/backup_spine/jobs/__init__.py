"""Scheduled backup jobs.

┌──────────────────────────────────────────────────────────────────────────────┐
│  SCHEDULED BACKUP JOBS                                                        │
│                                                                               │
│   ScheduledJobRunner ──► JobRegistry ──► BackupJobOrchestrator               │
│        (store, lock)       (job type)        │                               │
│                                              ├── ConflictRescheduler         │
│                                              ├── BackupCleaner               │
│                                              │     └── filter_old_backups    │
│                                              └── ScheduleCancellationGate    │
│                                                                               │
│  Collaborators (protocols.py): InstanceRegistry, BackupExecutor,             │
│  BackupCatalog, ScheduleRegistry, PlanCatalog, JobStore, LockManager         │
└──────────────────────────────────────────────────────────────────────────────┘

Example:
    >>> from backup_spine.jobs import (
    ...     BackupJobOrchestrator, JobRegistry, JobType, ScheduledJobRunner,
    ... )
    >>> registry = JobRegistry()
    >>> registry.register(JobType.SCHEDULED_BACKUP, BackupJobOrchestrator(...))
    >>> runner = ScheduledJobRunner(store, registry)
    >>> await runner.run_tick("abc-123_ScheduledBackup")
"""

from .cancellation import ScheduleCancellationGate
from .cron import (
    cron_with_interval_after_minutes,
    next_fire_time,
    parse_delay_minutes,
)
from .models import (
    BackupRecord,
    BackupRunStatus,
    BackupState,
    BackupTrigger,
    DeleteBackupStatus,
    JobPayload,
    JobType,
    TickResult,
)
from .orchestrator import INSTANCE_DELETED, BackupJobOrchestrator
from .protocols import (
    BackupCatalog,
    BackupExecutor,
    InstanceRegistry,
    JobStore,
    LockManager,
    PlanCatalog,
    ScheduleRegistry,
)
from .registry import (
    JobRegistry,
    JobService,
    get_default_registry,
    reset_default_registry,
)
from .reschedule import ConflictRescheduler
from .retention import BackupCleaner, filter_old_backups, is_deletable
from .runner import (
    InMemoryJobStore,
    InMemoryLockManager,
    RunnerStats,
    ScheduledJobRunner,
    TickRecord,
)

__all__ = [
    # Models
    "BackupRecord",
    "BackupRunStatus",
    "BackupState",
    "BackupTrigger",
    "DeleteBackupStatus",
    "JobPayload",
    "JobType",
    "TickResult",
    # Orchestration
    "INSTANCE_DELETED",
    "BackupJobOrchestrator",
    "ConflictRescheduler",
    "BackupCleaner",
    "filter_old_backups",
    "is_deletable",
    "ScheduleCancellationGate",
    # Cron
    "cron_with_interval_after_minutes",
    "next_fire_time",
    "parse_delay_minutes",
    # Protocols
    "BackupCatalog",
    "BackupExecutor",
    "InstanceRegistry",
    "JobStore",
    "LockManager",
    "PlanCatalog",
    "ScheduleRegistry",
    # Registry / runner
    "JobRegistry",
    "JobService",
    "get_default_registry",
    "reset_default_registry",
    "InMemoryJobStore",
    "InMemoryLockManager",
    "RunnerStats",
    "ScheduledJobRunner",
    "TickRecord",
]
