"""Snapshot Record — validation of persisted snapshot rows at the store boundary.

Invariants:
    - A row that fails validation is treated as corrupt (store logs, returns None)
    - Naive datetimes read back from SQLite are interpreted as UTC
    - limited rows must carry a positive limit
"""

from datetime import datetime, timedelta, timezone

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from unitrack.core.domain_types import IssueKey
from unitrack.core.timer_snapshot import SavedSnapshot


class SnapshotRecord(BaseModel):
    """Persisted form of SavedSnapshot (durations in seconds)."""
    model_config = ConfigDict(from_attributes=True)

    issue_key: str = Field(min_length=1)
    elapsed_seconds: float = Field(ge=0, allow_inf_nan=False)
    start_instant: datetime
    accumulated_pause_seconds: float = Field(ge=0, allow_inf_nan=False)
    saved_at: datetime
    limited: bool = False
    limit_seconds: float = Field(0.0, ge=0, allow_inf_nan=False)

    @field_validator("start_instant", "saved_at")
    @classmethod
    def assume_utc(cls, v: datetime) -> datetime:
        return v.replace(tzinfo=timezone.utc) if v.tzinfo is None else v

    @model_validator(mode="after")
    def limited_needs_limit(self) -> "SnapshotRecord":
        if self.limited and self.limit_seconds <= 0:
            raise ValueError("limited snapshot without a positive limit")
        return self

    def to_snapshot(self) -> SavedSnapshot:
        return SavedSnapshot(
            issue_key=IssueKey(self.issue_key),
            elapsed_at_save=timedelta(seconds=self.elapsed_seconds),
            start_instant=self.start_instant,
            accumulated_pause=timedelta(seconds=self.accumulated_pause_seconds),
            saved_at=self.saved_at,
            limited=self.limited,
            limit=timedelta(seconds=self.limit_seconds),
        )
