"""Best-effort retirement of a deleted instance's backup schedule."""

from __future__ import annotations

from backup_spine.core.logging import get_logger

from .models import JobType
from .protocols import ScheduleRegistry

logger = get_logger(__name__)


class ScheduleCancellationGate:
    """Cancels the recurring backup schedule of an instance.

    Cancellation is advisory: a registry failure is logged and reported as
    ``False`` so it never decides whether the tick succeeded.
    """

    def __init__(
        self,
        schedule_registry: ScheduleRegistry,
        job_type: JobType = JobType.SCHEDULED_BACKUP,
    ) -> None:
        self.schedule_registry = schedule_registry
        self.job_type = job_type

    async def maybe_cancel(self, instance_id: str) -> bool:
        """Cancel the schedule; True when the registry accepted it."""
        try:
            await self.schedule_registry.cancel_schedule(instance_id, self.job_type)
        except Exception as e:
            logger.error(
                "schedule_cancellation.failed",
                instance_id=instance_id,
                job_type=self.job_type.value,
                error=str(e),
            )
            return False

        logger.info(
            "schedule_cancellation.cancelled",
            instance_id=instance_id,
            job_type=self.job_type.value,
        )
        return True
