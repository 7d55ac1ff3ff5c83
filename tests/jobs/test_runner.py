"""Tests for ScheduledJobRunner and JobRegistry."""

from __future__ import annotations

import pytest

from backup_spine.core.errors import BackupExecutorError, ConflictError, JobNotRegisteredError
from backup_spine.jobs import (
    InMemoryJobStore,
    InMemoryLockManager,
    JobRegistry,
    JobType,
    ScheduledJobRunner,
    get_default_registry,
    reset_default_registry,
)


@pytest.fixture
def registry(orchestrator):
    registry = JobRegistry()
    registry.register(JobType.SCHEDULED_BACKUP, orchestrator)
    return registry


@pytest.fixture
def store(job):
    return InMemoryJobStore([job])


@pytest.fixture
def locks():
    return InMemoryLockManager()


@pytest.fixture
def runner(store, registry, locks):
    return ScheduledJobRunner(store, registry, lock_manager=locks)


class TestJobRegistry:
    """Test job type lookup."""

    def test_register_and_get(self, orchestrator):
        registry = JobRegistry()
        registry.register(JobType.SCHEDULED_BACKUP, orchestrator)

        assert registry.get(JobType.SCHEDULED_BACKUP) is orchestrator
        assert registry.has(JobType.SCHEDULED_BACKUP)
        assert registry.list_job_types() == [JobType.SCHEDULED_BACKUP]

    def test_unknown_job_type(self):
        with pytest.raises(JobNotRegisteredError, match="ScheduledBackup"):
            JobRegistry().get(JobType.SCHEDULED_BACKUP)

    def test_unregister(self, orchestrator):
        registry = JobRegistry()
        registry.register(JobType.SCHEDULED_BACKUP, orchestrator)

        assert registry.unregister(JobType.SCHEDULED_BACKUP) is True
        assert registry.unregister(JobType.SCHEDULED_BACKUP) is False

    def test_default_registry_singleton(self):
        reset_default_registry()
        assert get_default_registry() is get_default_registry()
        reset_default_registry()


class TestScheduledJobRunner:
    """Test load / run / persist cycle."""

    @pytest.mark.asyncio
    async def test_successful_tick(self, runner, store, locks, job):
        record = await runner.run_tick(job.name)

        assert record.succeeded is True
        assert record.status.start_backup_status == "started"
        assert store.snapshot(job.name) == job
        assert not locks.is_locked(job.name)
        assert runner.get_stats().succeeded == 1

    @pytest.mark.asyncio
    async def test_conflict_persists_rescheduled_job(self, runner, store, executor, locks, job):
        """The retry armed by the orchestrator survives to the next tick."""
        executor.start_error = ConflictError("busy")

        record = await runner.run_tick(job.name)

        assert record.succeeded is False
        assert record.error["error_type"] == "ConflictError"
        saved = store.snapshot(job.name)
        assert saved.attempt == 1
        assert saved.repeat_interval == "10 10 * * *"
        assert not locks.is_locked(job.name)

    @pytest.mark.asyncio
    async def test_attempts_accumulate_then_reset(self, runner, store, executor, job):
        """Conflicts count up to max_attempts and then reset."""
        executor.start_error = ConflictError("busy")

        for expected in (1, 2, 3, 0):
            await runner.run_tick(job.name)
            assert store.snapshot(job.name).attempt == expected

        assert runner.get_stats().failed == 4

    @pytest.mark.asyncio
    async def test_fatal_error_leaves_job(self, runner, store, executor, locks, job):
        executor.start_error = BackupExecutorError("boom")

        record = await runner.run_tick(job.name)

        assert record.succeeded is False
        assert store.snapshot(job.name) == job
        assert not locks.is_locked(job.name)

    @pytest.mark.asyncio
    async def test_non_domain_error_captured(self, runner, instance_registry, locks, job):
        instance_registry.error = ConnectionError("unreachable")

        record = await runner.run_tick(job.name)

        assert record.error == {"error_type": "ConnectionError", "message": "unreachable"}
        assert not locks.is_locked(job.name)

    @pytest.mark.asyncio
    async def test_skips_when_locked(self, runner, locks, executor, job):
        await locks.acquire(job.name)

        record = await runner.run_tick(job.name)

        assert record.skipped is True
        assert executor.start_calls == []
        assert runner.get_stats().skipped == 1

    @pytest.mark.asyncio
    async def test_unknown_job(self, runner, locks):
        record = await runner.run_tick("missing")

        assert record.succeeded is False
        assert record.error["error_type"] == "KeyError"
        assert not locks.is_locked("missing")
