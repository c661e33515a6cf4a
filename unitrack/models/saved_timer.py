"""SavedTimer ORM — the Recovery Store's one-row-per-issue snapshot table.

Invariants:
    - storage_key (issue key with "/" replaced by "_") is the primary key
    - Durations stored as float seconds; instants as UTC datetimes
    - Rows are upserted on the save cadence and deleted on cancel/submit/expiry
"""

from datetime import datetime, timezone

from sqlalchemy import Boolean, DateTime, Float, String
from sqlalchemy.orm import Mapped, mapped_column

from unitrack.db.base import Base


class SavedTimer(Base):
    """Durable snapshot of an in-progress timer."""
    __tablename__ = "saved_timers"

    storage_key: Mapped[str] = mapped_column(String(200), primary_key=True)
    issue_key: Mapped[str] = mapped_column(String(200), nullable=False)
    elapsed_seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
    start_instant: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False,
    )
    accumulated_pause_seconds: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0,
    )
    saved_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )
    limited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    limit_seconds: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)
