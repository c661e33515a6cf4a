"""Timer Schemas — request bodies and response views for the timer API.

Invariants:
    - issue_key bodies are stripped; normalization (prefix) happens in the route
    - TimerStatusResponse is built only from an engine TimerStatus, never from the ORM
    - Durations cross the wire as float seconds plus a formatted string
"""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from unitrack.core.pending_decisions import AwaitingRecovery, PendingDecision
from unitrack.core.rounding import format_clock, format_quarter
from unitrack.core.timer_effects import CompletedEntry
from unitrack.core.timer_engine import TimerStatus


class StartTimerRequest(BaseModel):
    issue_key: str = Field(max_length=200)

    @field_validator("issue_key")
    @classmethod
    def strip_issue_key(cls, v: str) -> str:
        return v.strip()


class LimitSetupRequest(StartTimerRequest):
    """Begin limited-timer setup for an issue."""


class LimitRequest(BaseModel):
    # Range is checked by the engine so a bad value keeps the setup open.
    minutes: int


class RecoveryDecisionRequest(BaseModel):
    resume: bool


class CancelConfirmationRequest(BaseModel):
    confirm: bool


class PendingDecisionResponse(BaseModel):
    kind: str
    issue_key: str
    elapsed_at_save: float | None = None
    saved_at: datetime | None = None
    limited: bool | None = None
    limit_seconds: float | None = None

    @classmethod
    def from_decision(cls, decision: PendingDecision) -> "PendingDecisionResponse":
        if isinstance(decision, AwaitingRecovery):
            snapshot = decision.snapshot
            return cls(
                kind=decision.kind.value,
                issue_key=decision.issue_key,
                elapsed_at_save=snapshot.elapsed_at_save.total_seconds(),
                saved_at=snapshot.saved_at,
                limited=snapshot.limited,
                limit_seconds=snapshot.limit.total_seconds() if snapshot.limited else None,
            )
        return cls(kind=decision.kind.value, issue_key=decision.issue_key)


class TimerStatusResponse(BaseModel):
    """Everything a client needs to render the timer."""
    state: str
    issue_key: str | None = None
    elapsed_seconds: float = 0.0
    elapsed: str = "00:00:00"
    limit_seconds: float | None = None
    progress: float | None = None
    rounded_preview: str = "0:00"
    pending: PendingDecisionResponse | None = None

    @classmethod
    def from_status(cls, status: TimerStatus) -> "TimerStatusResponse":
        return cls(
            state=status.state.value,
            issue_key=status.issue_key,
            elapsed_seconds=status.elapsed.total_seconds(),
            elapsed=format_clock(status.elapsed),
            limit_seconds=status.limit.total_seconds() if status.limit else None,
            progress=status.progress,
            rounded_preview=format_quarter(status.rounded_minutes),
            pending=(
                PendingDecisionResponse.from_decision(status.pending)
                if status.pending is not None else None
            ),
        )


class CompletedEntryResponse(BaseModel):
    issue_key: str
    elapsed_seconds: float
    elapsed: str
    rounded_minutes: int
    rounded: str
    kind: str
    completed_at: datetime

    @classmethod
    def from_entry(cls, entry: CompletedEntry) -> "CompletedEntryResponse":
        return cls(
            issue_key=entry.issue_key,
            elapsed_seconds=entry.elapsed.total_seconds(),
            elapsed=format_clock(entry.elapsed),
            rounded_minutes=entry.rounded_minutes,
            rounded=entry.rounded,
            kind=entry.kind.value,
            completed_at=entry.completed_at,
        )


class SubmitResponse(BaseModel):
    entry: CompletedEntryResponse | None = None
    timer: TimerStatusResponse


class HistoryResponse(BaseModel):
    issues: list[str]
