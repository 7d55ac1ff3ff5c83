"""
Structured error types for backup-spine.

Provides a typed error hierarchy carrying the metadata the backup tick needs
to decide between "reschedule and report", "treat as deleted" and "fail the
tick": a category, a retryable flag, structured context and an optional
chained cause.

Manifesto:
    - **Typed Error Hierarchy:** One class per collaborator classification
    - **Explicit Retry Semantics:** Each error knows if it's retryable
    - **Rich Context:** Errors carry instance/job metadata for logging
    - **Error Chaining:** Preserve original exceptions while adding context

Architecture:
    ::

        ┌─────────────────────────────────────────────────────────────────┐
        │                     BackupSpineError                             │
        │  (category, retryable, context, cause, job_state)                │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │  BadRequestError       InstanceNotFoundError                     │
        │  (VALIDATION)          (SOURCE)                                  │
        │                                                                  │
        │  OperationInProgressError  (ORCHESTRATION, retryable)            │
        │       │                                                          │
        │  ConflictError         UnprocessableEntityError                  │
        │                                                                  │
        │  ConfigError           BackupExecutorError   OrchestrationError  │
        │  (CONFIG)              (SOURCE)              (ORCHESTRATION)     │
        │       │                                          │               │
        │  InvalidConfigError                      ScheduleCancellationError│
        │                                          JobNotRegisteredError    │
        └─────────────────────────────────────────────────────────────────┘

Examples:
    >>> error = ConflictError("backup already in progress")
    >>> error.retryable
    True
    >>> error.with_context(instance_id="abc-123").context.instance_id
    'abc-123'

Guardrails:
    ❌ DON'T: Raise plain Exception from a collaborator adapter
    ✅ DO: Map transport failures onto ConflictError / InstanceNotFoundError

    ❌ DON'T: Swallow the original exception
    ✅ DO: Pass it as cause= for error chaining

Tags:
    error-handling, exception-hierarchy, retry-logic, backup-spine
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from backup_spine.jobs.models import JobPayload


class ErrorCategory(str, Enum):
    """
    Standard error categories for classification and routing.

    Attributes:
        NETWORK: Connection, timeout, DNS errors
        SOURCE: Collaborator returned an error (registry, executor, catalog)
        VALIDATION: Malformed job payloads
        CONFIG: Missing config, invalid settings
        ORCHESTRATION: Conflicts, scheduler and registry errors
        INTERNAL: Bugs, unexpected state
        UNKNOWN: Uncategorized errors
    """

    NETWORK = "NETWORK"
    SOURCE = "SOURCE"
    VALIDATION = "VALIDATION"
    CONFIG = "CONFIG"
    ORCHESTRATION = "ORCHESTRATION"
    INTERNAL = "INTERNAL"
    UNKNOWN = "UNKNOWN"


@dataclass
class ErrorContext:
    """
    Structured metadata context for errors.

    Typed fields cover the identifiers every backup log line carries; any
    additional metadata goes into ``metadata``. ``to_dict()`` serializes the
    non-None fields for logging.

    Attributes:
        job_name: Name of the scheduled job document
        instance_id: Service instance the tick runs for
        tenant_id: Tenant (space/namespace) owning the instance
        backup_guid: Backup being started or deleted
        metadata: Additional key-value pairs
    """

    job_name: str | None = None
    instance_id: str | None = None
    tenant_id: str | None = None
    backup_guid: str | None = None

    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for logging."""
        result = {}
        for key in ["job_name", "instance_id", "tenant_id", "backup_guid"]:
            value = getattr(self, key)
            if value is not None:
                result[key] = value
        if self.metadata:
            result.update(self.metadata)
        return result


class BackupSpineError(Exception):
    """
    Base exception for all backup-spine errors.

    Every error carries:
    - **category:** ErrorCategory enum for classification and routing
    - **retryable:** Boolean indicating if the operation can be retried
    - **context:** ErrorContext with structured metadata
    - **cause:** Optional underlying exception for chaining
    - **job_state:** Updated job state to persist even though the tick failed

    Subclasses set ``default_category`` and ``default_retryable``.

    Examples:
        >>> error = BackupSpineError("Something went wrong")
        >>> error.category
        <ErrorCategory.INTERNAL: 'INTERNAL'>
        >>> error.to_dict()["retryable"]
        False
    """

    default_category: ErrorCategory = ErrorCategory.INTERNAL
    default_retryable: bool = False

    def __init__(
        self,
        message: str,
        *,
        category: ErrorCategory | None = None,
        retryable: bool | None = None,
        context: ErrorContext | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.category = category or self.default_category
        self.retryable = retryable if retryable is not None else self.default_retryable
        self.context = context or ErrorContext()
        self.cause = cause
        self.job_state: JobPayload | None = None

        if cause is not None:
            self.__cause__ = cause

    def with_context(self, **kwargs: Any) -> BackupSpineError:
        """
        Add context to this error (fluent API).

        Usage:
            raise ConflictError("Busy").with_context(
                instance_id="abc-123",
                operation="update",
            )
        """
        for key, value in kwargs.items():
            if hasattr(self.context, key) and key != "metadata":
                setattr(self.context, key, value)
            else:
                self.context.metadata[key] = value
        return self

    def with_job_state(self, job: JobPayload) -> BackupSpineError:
        """Attach the job state the runner must persist despite the failure."""
        self.job_state = job
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        result = {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "category": self.category.value,
            "retryable": self.retryable,
        }
        context_dict = self.context.to_dict()
        if context_dict:
            result["context"] = context_dict
        if self.cause is not None:
            result["cause"] = str(self.cause)
        return result

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.message!r}, category={self.category.value})"


# =============================================================================
# VALIDATION ERRORS
# =============================================================================


class BadRequestError(BackupSpineError):
    """
    Malformed job payload.

    Never retryable - the job document must be fixed.
    """

    default_category = ErrorCategory.VALIDATION
    default_retryable = False

    def __init__(
        self,
        message: str,
        *,
        missing_fields: list[str] | None = None,
        **kwargs: Any,
    ):
        super().__init__(message, **kwargs)
        self.missing_fields = missing_fields or []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        if self.missing_fields:
            result["missing_fields"] = self.missing_fields
        return result


# =============================================================================
# COLLABORATOR ERRORS
# =============================================================================


class InstanceNotFoundError(BackupSpineError):
    """Service instance no longer exists in the instance registry."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False

    def __init__(self, instance_id: str, message: str | None = None):
        self.instance_id = instance_id
        super().__init__(message or f"Service instance not found: {instance_id}")
        self.context.instance_id = instance_id


class BackupExecutorError(BackupSpineError):
    """Backup executor rejected or failed a request."""

    default_category = ErrorCategory.SOURCE
    default_retryable = False


class OperationInProgressError(BackupSpineError):
    """
    Another operation is already running for the instance.

    The executor enforces mutual exclusion and answers with one of the two
    subclasses; both are recoverable through a rescheduled retry.
    """

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = True


class ConflictError(OperationInProgressError):
    """Executor answered with a conflict (HTTP 409 equivalent)."""

    pass


class UnprocessableEntityError(OperationInProgressError):
    """Executor answered with unprocessable entity (HTTP 422 equivalent)."""

    pass


# =============================================================================
# CONFIGURATION ERRORS
# =============================================================================


class ConfigError(BackupSpineError):
    """
    Configuration error.

    Never retryable - configuration must be fixed.
    """

    default_category = ErrorCategory.CONFIG
    default_retryable = False


class InvalidConfigError(ConfigError):
    """Configuration value is invalid."""

    def __init__(self, key: str, value: Any, message: str | None = None):
        self.key = key
        self.value = value
        super().__init__(message or f"Invalid configuration for {key}: {value!r}")


# =============================================================================
# ORCHESTRATION ERRORS
# =============================================================================


class OrchestrationError(BackupSpineError):
    """Scheduler or job registry error."""

    default_category = ErrorCategory.ORCHESTRATION
    default_retryable = False


class ScheduleCancellationError(OrchestrationError):
    """Schedule registry failed to cancel a recurring job."""

    pass


class JobNotRegisteredError(OrchestrationError):
    """No service registered for a job type."""

    def __init__(self, job_type: str, available: list[str] | None = None):
        self.job_type = job_type
        self.available = available or []
        super().__init__(
            f"No service registered for job type {job_type}. "
            f"Available: {self.available or 'none'}"
        )


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def is_retryable(error: Exception) -> bool:
    """Check if an error is retryable."""
    if isinstance(error, BackupSpineError):
        return error.retryable
    return isinstance(error, (ConnectionError, TimeoutError))


def is_conflict(error: Exception) -> bool:
    """Check if an error is one of the two recoverable executor classifications."""
    return isinstance(error, (ConflictError, UnprocessableEntityError))


def categorize_error(error: Exception) -> ErrorCategory:
    """Get the category of an error."""
    if isinstance(error, BackupSpineError):
        return error.category
    if isinstance(error, (ConnectionError, TimeoutError)):
        return ErrorCategory.NETWORK
    if isinstance(error, ValueError):
        return ErrorCategory.VALIDATION
    return ErrorCategory.UNKNOWN


__all__ = [
    "ErrorCategory",
    "ErrorContext",
    "BackupSpineError",
    "BadRequestError",
    "InstanceNotFoundError",
    "BackupExecutorError",
    "OperationInProgressError",
    "ConflictError",
    "UnprocessableEntityError",
    "ConfigError",
    "InvalidConfigError",
    "OrchestrationError",
    "ScheduleCancellationError",
    "JobNotRegisteredError",
    "is_retryable",
    "is_conflict",
    "categorize_error",
]
