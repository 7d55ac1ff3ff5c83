"""
backup-spine: scheduled backup orchestration for stateful service instances.

On each scheduled tick for an instance it decides whether to start a new
backup, reschedules around conflicting operations, prunes backups past the
retention window and retires the schedule once the instance is gone.

Modules:
    core      Errors, structured logging, settings
    jobs      Orchestrator, rescheduler, retention, cancellation, runner
    managers  Instance/platform manager resolution

Tags:
    backup-spine, scheduling, backup, retention
"""

__version__ = "0.1.0"
