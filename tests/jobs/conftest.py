"""Pytest fixtures for scheduled backup job tests.

Every collaborator protocol has an in-memory fake recording its calls, so
tests can assert both outcomes and the exact remote traffic of a tick.
"""

from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest

from backup_spine.core.errors import InstanceNotFoundError
from backup_spine.core.settings import BackupSettings
from backup_spine.jobs import (
    BackupJobOrchestrator,
    BackupRecord,
    BackupState,
    BackupTrigger,
    JobPayload,
)

NOW = datetime(2026, 3, 10, 10, 0, tzinfo=UTC)  # a Tuesday


class FakeInstanceRegistry:
    def __init__(self, deleted: bool = False, error: Exception | None = None):
        self.deleted = deleted
        self.error = error
        self.calls: list[str] = []

    async def find_service_plan(self, instance_id):
        self.calls.append(instance_id)
        if self.error is not None:
            raise self.error
        if self.deleted:
            raise InstanceNotFoundError(instance_id)
        return {"plan_id": "plan-1"}


class FakeExecutor:
    def __init__(self, token: str = "started"):
        self.token = token
        self.start_error: Exception | None = None
        self.delete_error: Exception | None = None
        self.start_calls: list[tuple] = []
        self.delete_calls: list[tuple] = []

    @property
    def calls(self):
        return self.start_calls + self.delete_calls

    async def start_backup(self, instance_id, backup_type, trigger):
        self.start_calls.append((instance_id, backup_type, trigger))
        if self.start_error is not None:
            raise self.start_error
        return self.token

    async def delete_backup(self, backup_guid, tenant_id):
        self.delete_calls.append((backup_guid, tenant_id))
        if self.delete_error is not None:
            raise self.delete_error


class FakeCatalog:
    def __init__(self, old_backups=None, remaining=None):
        self.old_backups: list[BackupRecord] = list(old_backups or [])
        self.remaining: list[str] = list(remaining or [])
        self.list_calls: list[tuple] = []
        self.filename_calls: list[tuple] = []

    @property
    def calls(self):
        return self.list_calls + self.filename_calls

    async def list_backups_older_than(self, instance_id, tenant_id, retention_days):
        self.list_calls.append((instance_id, tenant_id, retention_days))
        return list(self.old_backups)

    async def list_backup_filenames(self, instance_id, tenant_id, before):
        self.filename_calls.append((instance_id, tenant_id, before))
        return list(self.remaining)


class FakeScheduleRegistry:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.calls: list[tuple] = []

    async def cancel_schedule(self, instance_id, job_type):
        self.calls.append((instance_id, job_type))
        if self.error is not None:
            raise self.error


class FakePlanCatalog:
    def __init__(self, interval: str | None = "daily", error: Exception | None = None):
        self.interval = interval
        self.error = error
        self.calls: list[str | None] = []

    def get_backup_interval(self, plan_id):
        self.calls.append(plan_id)
        if self.error is not None:
            raise self.error
        return self.interval


def make_backup(
    guid: str,
    days_ago: int,
    state: BackupState = BackupState.FAILED,
    trigger: BackupTrigger = BackupTrigger.SCHEDULED,
) -> BackupRecord:
    return BackupRecord(
        backup_guid=guid,
        type="online",
        trigger=trigger,
        state=state,
        started_at=NOW - timedelta(days=days_ago),
    )


@pytest.fixture(name="make_backup")
def make_backup_fixture():
    return make_backup


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def settings():
    return BackupSettings(
        _env_file=None,
        retention_period_in_days=14,
        max_attempts=3,
        reschedule_delay="10 minutes",
    )


@pytest.fixture
def job():
    return JobPayload(
        name="inst-1_ScheduledBackup",
        instance_id="inst-1",
        backup_type="online",
        trigger=BackupTrigger.SCHEDULED,
        tenant_id="space-1",
        plan_id="plan-1",
        attempt=0,
        max_attempts=3,
        reschedule_delay="10 minutes",
        repeat_interval="0 2 * * *",
    )


@pytest.fixture
def instance_registry():
    return FakeInstanceRegistry()


@pytest.fixture
def executor():
    return FakeExecutor()


@pytest.fixture
def catalog():
    return FakeCatalog()


@pytest.fixture
def schedule_registry():
    return FakeScheduleRegistry()


@pytest.fixture
def plan_catalog():
    return FakePlanCatalog()


@pytest.fixture
def orchestrator(instance_registry, executor, catalog, schedule_registry, plan_catalog, settings):
    return BackupJobOrchestrator(
        instance_registry=instance_registry,
        executor=executor,
        catalog=catalog,
        schedule_registry=schedule_registry,
        plan_catalog=plan_catalog,
        settings=settings,
        clock=lambda: NOW,
    )
