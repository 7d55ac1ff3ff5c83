"""Conflict rescheduling for scheduled backups.

When the executor answers a start request with a conflict, another
operation (update, restore, on-demand backup) holds the instance. Instead of
waiting for the next natural fire, the job's recurrence is shifted to fire
``reschedule_delay`` from now at the plan's usual frequency. The number of
such shifts per cycle is bounded by ``max_attempts``; past the ceiling the
counter resets and the job keeps its existing recurrence.

The reset is silent apart from an error log line: nothing records that a
cycle gave up, so repeated exhaustion is only visible through log alerting.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import UTC, datetime

from backup_spine.core.logging import get_logger
from backup_spine.core.settings import BackupSettings, get_settings

from .cron import cron_with_interval_after_minutes, parse_delay_minutes
from .models import JobPayload
from .protocols import PlanCatalog

logger = get_logger(__name__)


class ConflictRescheduler:
    """Computes the retry schedule of a job after a conflicting operation.

    Example:
        >>> rescheduler = ConflictRescheduler(plan_catalog)
        >>> job = rescheduler.reschedule(job)
        >>> job.attempt, job.repeat_interval
        (1, '10 10 * * *')
    """

    def __init__(
        self,
        plan_catalog: PlanCatalog,
        settings: BackupSettings | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self.plan_catalog = plan_catalog
        self.settings = settings or get_settings()
        self._clock = clock or (lambda: datetime.now(UTC))

    def reschedule(self, job: JobPayload) -> JobPayload:
        """Return the job with its retry fields advanced.

        Never raises: a failure to compute the new interval must not mask
        the conflict that triggered the reschedule.
        """
        now = self._clock()
        attempt = job.attempt + 1
        first_attempt_at = job.first_attempt_at or now

        if attempt > job.max_attempts:
            logger.error(
                "scheduled_backup.max_attempts_exceeded",
                instance_id=job.instance_id,
                max_attempts=job.max_attempts,
                attempt=job.attempt,
                first_attempt_at=first_attempt_at.isoformat(),
            )
            return job.evolve(attempt=0, first_attempt_at=None)

        job = job.evolve(attempt=attempt, first_attempt_at=first_attempt_at)
        logger.info(
            "scheduled_backup.rescheduling",
            instance_id=job.instance_id,
            reschedule_delay=job.reschedule_delay,
            attempt=attempt,
            first_attempt_at=first_attempt_at.isoformat(),
        )

        try:
            delay_minutes = parse_delay_minutes(job.reschedule_delay)
            interval = (
                self.plan_catalog.get_backup_interval(job.plan_id)
                or self.settings.default_backup_interval
            )
            repeat_interval = cron_with_interval_after_minutes(
                interval,
                delay_minutes or self.settings.default_retry_delay_minutes,
                now=now,
            )
        except Exception as e:
            logger.exception(
                "scheduled_backup.reschedule_failed",
                instance_id=job.instance_id,
                plan_id=job.plan_id,
                error=str(e),
            )
            return job

        logger.info(
            "scheduled_backup.rescheduled",
            instance_id=job.instance_id,
            repeat_interval=repeat_interval,
        )
        return job.evolve(repeat_interval=repeat_interval)
