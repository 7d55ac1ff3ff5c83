"""Scheduled backup job models.

Manifesto:
    The job document is the durable record of a recurring backup: its
    retry counters and recurrence live there, not on the orchestrator.
    Modelling it as a frozen dataclass means every change is a new value
    the job runner must persist explicitly - no hidden aliasing between a
    tick and the stored document.

Models:
    JobPayload        One scheduled tick's job document
    BackupRecord      A historical backup row from the catalog
    DeleteBackupStatus / BackupRunStatus   Outcome of one tick
    TickResult        Outcome plus the (possibly updated) job state

Tags:
    backup-spine, models, dataclasses, scheduling, job-document

Doc-Types:
    api-reference, data-model
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import UTC, datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backup_spine.core.settings import BackupSettings


class JobType(str, Enum):
    """Recurring job types known to the schedule registry."""

    SCHEDULED_BACKUP = "ScheduledBackup"


class BackupTrigger(str, Enum):
    """Who asked for a backup."""

    SCHEDULED = "scheduled"
    ON_DEMAND = "on-demand"


class BackupState(str, Enum):
    """Backup lifecycle states reported by the catalog."""

    IN_QUEUE = "in_queue"
    PROCESSING = "processing"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABORTING = "aborting"
    ABORTED = "aborted"
    DELETE_FAILED = "delete_failed"


def parse_timestamp(value: datetime | str | None) -> datetime | None:
    """Parse an ISO 8601 timestamp, normalizing naive values to UTC."""
    if value is None or value == "":
        return None
    if isinstance(value, str):
        value = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value


# ---------------------------------------------------------------------------
# Job document
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class JobPayload:
    """Job document of a scheduled backup (one per instance)."""

    name: str = ""
    job_type: JobType = JobType.SCHEDULED_BACKUP
    instance_id: str | None = None
    backup_type: str | None = None  # online, offline
    trigger: BackupTrigger = BackupTrigger.SCHEDULED
    tenant_id: str | None = None
    plan_id: str | None = None
    attempt: int = 0
    max_attempts: int = 3
    reschedule_delay: str = "10 minutes"
    first_attempt_at: datetime | None = None
    repeat_interval: str | None = None

    def __post_init__(self) -> None:
        if self.attempt < 0:
            raise ValueError(f"attempt must be non-negative, got {self.attempt}")
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be positive, got {self.max_attempts}")

    def evolve(self, **changes: Any) -> JobPayload:
        """Return a copy with ``changes`` applied."""
        return replace(self, **changes)

    @classmethod
    def from_document(
        cls,
        doc: dict[str, Any],
        settings: BackupSettings | None = None,
    ) -> JobPayload:
        """Build a payload from a persisted job document.

        ``max_attempts`` and ``reschedule_delay`` fall back to ``settings``
        when the document does not carry them.
        """
        if settings is None:
            from backup_spine.core.settings import get_settings

            settings = get_settings()

        instance_id = doc.get("instance_id")
        return cls(
            name=doc.get("name") or (f"{instance_id}_{JobType.SCHEDULED_BACKUP.value}" if instance_id else ""),
            job_type=JobType(doc.get("job_type", JobType.SCHEDULED_BACKUP.value)),
            instance_id=instance_id,
            backup_type=doc.get("type"),
            trigger=BackupTrigger(doc.get("trigger") or BackupTrigger.SCHEDULED.value),
            tenant_id=doc.get("tenant_id"),
            plan_id=doc.get("plan_id"),
            attempt=int(doc.get("attempt") or 0),
            max_attempts=int(doc.get("max_attempts") or settings.max_attempts),
            reschedule_delay=doc.get("reschedule_delay") or settings.reschedule_delay,
            first_attempt_at=parse_timestamp(doc.get("first_attempt_at")),
            repeat_interval=doc.get("repeat_interval"),
        )

    def to_document(self) -> dict[str, Any]:
        """Serialize to the persisted job document form."""
        return {
            "name": self.name,
            "job_type": self.job_type.value,
            "instance_id": self.instance_id,
            "type": self.backup_type,
            "trigger": self.trigger.value,
            "tenant_id": self.tenant_id,
            "plan_id": self.plan_id,
            "attempt": self.attempt,
            "max_attempts": self.max_attempts,
            "reschedule_delay": self.reschedule_delay,
            "first_attempt_at": self.first_attempt_at.isoformat() if self.first_attempt_at else None,
            "repeat_interval": self.repeat_interval,
        }


# ---------------------------------------------------------------------------
# Backup catalog rows
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class BackupRecord:
    """Historical backup as listed by the backup catalog."""

    backup_guid: str
    type: str
    trigger: BackupTrigger
    state: BackupState
    started_at: datetime

    @property
    def succeeded(self) -> bool:
        return self.state == BackupState.SUCCEEDED

    @classmethod
    def from_dict(cls, row: dict[str, Any]) -> BackupRecord:
        return cls(
            backup_guid=row["backup_guid"],
            type=row.get("type", "online"),
            trigger=BackupTrigger(row.get("trigger", BackupTrigger.SCHEDULED.value)),
            state=BackupState(row["state"]),
            started_at=parse_timestamp(row["started_at"]),
        )


# ---------------------------------------------------------------------------
# Tick outcome
# ---------------------------------------------------------------------------


@dataclass
class DeleteBackupStatus:
    """Outcome of the cleanup step."""

    deleted_guids: list[str] = field(default_factory=list)
    job_cancelled: bool = False
    instance_deleted: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted_guids": list(self.deleted_guids),
            "job_cancelled": self.job_cancelled,
            "instance_deleted": self.instance_deleted,
        }


@dataclass
class BackupRunStatus:
    """Outcome of one tick, returned to the job runner."""

    start_backup_status: str = "failed"
    delete_backup_status: DeleteBackupStatus | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "start_backup_status": self.start_backup_status,
            "delete_backup_status": (
                self.delete_backup_status.to_dict() if self.delete_backup_status else "failed"
            ),
        }


@dataclass(frozen=True)
class TickResult:
    """Tick outcome plus the job state the runner must persist."""

    status: BackupRunStatus
    job: JobPayload
