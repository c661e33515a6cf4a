"""Error Hierarchy — typed, categorized exceptions for all unitrack failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Validation and conflict errors (400/409) never change timer state
    - Persistence errors never escape the Recovery Store; downstream errors never
      reach the engine (they occur after the session is already Idle)
    - to_response() produces the REST envelope; no internal details leaked

Design Decisions:
    - Single hierarchy with UnitrackError base: FastAPI global handler catches all
    - ErrorContext as dataclass: rich observability without coupling to logging
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    CONFLICT = "conflict"
    PERSISTENCE = "persistence"
    EXTERNAL_API = "external_api"
    INTERNAL = "internal"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    issue_key: str | None = None
    operation: str | None = None
    retry_after_ms: int | None = None


class UnitrackError(Exception):
    """Base exception for all unitrack errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    @property
    def recoverable(self) -> bool:
        return self.severity in (ErrorSeverity.INFO, ErrorSeverity.WARNING)

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "issue_key": self.context.issue_key,
                    "operation": self.context.operation,
                    "retry_after_ms": self.context.retry_after_ms,
                },
            }
        }


# ─── Validation Errors (400) ────────────────────────────────────

class EmptyIssueKeyError(UnitrackError):
    """Start requested without an issue key."""
    def __init__(self, context: ErrorContext | None = None):
        super().__init__(
            "Issue ID cannot be empty.",
            "EMPTY_ISSUE_KEY", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )


class InvalidLimitError(UnitrackError):
    """Time limit must be a positive number of minutes."""
    def __init__(self, value: object, context: ErrorContext | None = None):
        super().__init__(
            f"Please enter a valid positive number of minutes (got {value!r}).",
            "INVALID_LIMIT", ErrorCategory.VALIDATION,
            ErrorSeverity.WARNING, context, 400,
        )
        self.value = value


# ─── Conflict Errors (409) ──────────────────────────────────────

class TimerBusyError(UnitrackError):
    """A session is already active."""
    def __init__(self, issue_key: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.issue_key = issue_key
        super().__init__(
            f"A timer is already active for {issue_key}.",
            "TIMER_BUSY", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, ctx, 409,
        )


class DecisionPendingError(UnitrackError):
    """An open decision must be resolved before other transitions."""
    def __init__(self, kind: str, context: ErrorContext | None = None):
        super().__init__(
            f"Resolve the pending {kind.replace('_', ' ')} decision first.",
            "DECISION_PENDING", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.kind = kind


class NoPendingDecisionError(UnitrackError):
    """A decision was resolved that was never asked."""
    def __init__(self, kind: str, context: ErrorContext | None = None):
        super().__init__(
            f"No {kind.replace('_', ' ')} decision is pending.",
            "NO_PENDING_DECISION", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.kind = kind


# ─── Infrastructure Errors ──────────────────────────────────────

class PersistenceError(UnitrackError):
    """Local database operation failed."""
    def __init__(self, message: str, operation: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.operation = operation
        super().__init__(
            f"Persistence {operation} failed: {message}",
            "PERSISTENCE_ERROR", ErrorCategory.PERSISTENCE,
            ErrorSeverity.ERROR, ctx, 503,
        )
        self.operation = operation


class TrackerAPIError(UnitrackError):
    """Issue tracker (Linear) call failed."""
    def __init__(
        self,
        message: str,
        api_error_type: str,
        retry_after_ms: int | None = None,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.retry_after_ms = retry_after_ms
        super().__init__(
            f"Linear API error ({api_error_type}): {message}",
            "TRACKER_API_ERROR", ErrorCategory.EXTERNAL_API,
            ErrorSeverity.ERROR, ctx, 502,
        )
        self.api_error_type = api_error_type
