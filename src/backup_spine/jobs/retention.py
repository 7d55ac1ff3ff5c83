"""Backup retention and cleanup.

Backups older than the retention period are deleted, with one exception:
the most recent *successful* backup past the boundary is kept, together
with everything newer than it, so at least one restore point always
survives even if every backup inside the window failed.

    sorted newest first:   fail@t5  succeed@t4  fail@t3  fail@t1
                                    └── kept ──┘└─ candidates ─┘

Candidates are only deleted when they were scheduled or when the instance
itself is gone; on-demand backups of a live instance are the user's to
manage. Once a deleted instance has no backup artifacts left, its recurring
schedule is retired through the cancellation gate.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from datetime import UTC, datetime

from backup_spine.core.logging import get_logger
from backup_spine.core.settings import BackupSettings, get_settings

from .cancellation import ScheduleCancellationGate
from .models import BackupRecord, BackupTrigger, DeleteBackupStatus, JobPayload
from .protocols import BackupCatalog, BackupExecutor

logger = get_logger(__name__)


def filter_old_backups(old_backups: Iterable[BackupRecord] | None) -> list[BackupRecord]:
    """Select deletion candidates among backups past the retention boundary.

    Args:
        old_backups: Backups on or beyond the retention boundary day, in any
            order.

    Returns:
        Backups strictly older (in ``started_at`` order) than the latest
        successful one, newest first; all of them if none succeeded.
    """
    if not old_backups:
        return []
    # ascending then reversed: equal timestamps come out in reverse input order
    ordered = list(reversed(sorted(old_backups, key=lambda backup: backup.started_at)))
    for index, backup in enumerate(ordered):
        if backup.succeeded:
            return ordered[index + 1:]
    return ordered


def is_deletable(backup: BackupRecord, instance_deleted: bool) -> bool:
    """On-demand backups of a live instance are never deleted."""
    return backup.trigger == BackupTrigger.SCHEDULED or instance_deleted


class BackupCleaner:
    """Deletes obsolete backups of one instance and retires its schedule.

    Example:
        >>> cleaner = BackupCleaner(catalog, executor, gate)
        >>> status = await cleaner.cleanup(job, instance_deleted=False)
        >>> status.deleted_guids
        ['b-3', 'b-1']
    """

    def __init__(
        self,
        catalog: BackupCatalog,
        executor: BackupExecutor,
        cancellation_gate: ScheduleCancellationGate,
        settings: BackupSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.catalog = catalog
        self.executor = executor
        self.cancellation_gate = cancellation_gate
        self.settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(UTC))

    async def cleanup(self, job: JobPayload, instance_deleted: bool) -> DeleteBackupStatus:
        """Delete obsolete backups; cancel the schedule once nothing is left."""
        old_backups = await self.catalog.list_backups_older_than(
            job.instance_id,
            job.tenant_id,
            self.settings.retention_period_in_days,
        )
        candidates = filter_old_backups(old_backups)

        deleted_guids: list[str] = []
        for backup in candidates:
            logger.debug(
                "backup_cleanup.candidate",
                backup_guid=backup.backup_guid,
                trigger=backup.trigger.value,
                state=backup.state.value,
                started_at=backup.started_at.isoformat(),
            )
            if not is_deletable(backup, instance_deleted):
                continue
            logger.info(
                "backup_cleanup.deleting",
                backup_guid=backup.backup_guid,
                instance_id=job.instance_id,
                type=backup.type,
                started_at=backup.started_at.isoformat(),
                instance_deleted=instance_deleted,
            )
            await self.executor.delete_backup(backup.backup_guid, job.tenant_id)
            deleted_guids.append(backup.backup_guid)

        logger.info(
            "backup_cleanup.deleted",
            deleted_guids=deleted_guids,
            instance_deleted=instance_deleted,
        )
        status = DeleteBackupStatus(
            deleted_guids=deleted_guids,
            job_cancelled=False,
            instance_deleted=instance_deleted,
        )
        if not instance_deleted:
            return status

        remaining = await self.catalog.list_backup_filenames(
            job.instance_id,
            job.tenant_id,
            self._clock(),
        )
        if remaining:
            logger.info(
                "backup_cleanup.schedule_retained",
                instance_id=job.instance_id,
                remaining_backups=len(remaining),
            )
            return status

        logger.info("backup_cleanup.no_backups_left", instance_id=job.instance_id)
        status.job_cancelled = await self.cancellation_gate.maybe_cancel(job.instance_id)
        return status
