"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - IssueKey is a fully-qualified, non-empty identifier once it reaches the engine
    - All timer states encoded as Enums — no raw string matching
    - Durations are datetime.timedelta, instants are timezone-aware datetimes

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders
"""

from datetime import timedelta
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

IssueKey = NewType("IssueKey", str)      # e.g. "UE-1234"
StorageKey = NewType("StorageKey", str)  # IssueKey with "/" replaced by "_"


# ─── Enums ───────────────────────────────────────────────────────

class TimerState(str, Enum):
    """Stopwatch lifecycle states."""
    IDLE = "idle"
    RUNNING = "running"
    PAUSED = "paused"


class DecisionKind(str, Enum):
    """Pending user decisions that block ordinary transitions."""
    RECOVERY = "recovery"
    LIMIT = "limit"
    CANCEL_CONFIRMATION = "cancel_confirmation"


class CompletionKind(str, Enum):
    """How a session reached Submit."""
    MANUAL = "manual"
    AUTO = "auto"


# ─── Constants ───────────────────────────────────────────────────

QUARTER = timedelta(minutes=15)
# Rounding grace inherited from the billing rule: 0.001 minute below a boundary
QUARTER_GRACE = timedelta(milliseconds=60)
SAVE_INTERVAL = timedelta(minutes=1)
TICK_INTERVAL = timedelta(seconds=1)
DEFAULT_RETENTION_DAYS = 5
DEFAULT_ISSUE_PREFIX = "UE"
