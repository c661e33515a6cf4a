"""Timer Snapshot — durable surrogate of a TimerSession and its expiry rule.

Invariants:
    - A snapshot is live iff now - saved_at <= retention (strictly older expires)
    - limit is meaningful only when limited is True
    - Pure, no IO: the Recovery Store owns reading and writing
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from unitrack.core.domain_types import IssueKey


@dataclass(frozen=True)
class SavedSnapshot:
    """Point-in-time record of an in-progress session."""

    issue_key: IssueKey
    elapsed_at_save: timedelta
    start_instant: datetime
    accumulated_pause: timedelta
    saved_at: datetime
    limited: bool = False
    limit: timedelta = timedelta(0)

    @property
    def effective_limit(self) -> timedelta | None:
        return self.limit if self.limited and self.limit > timedelta(0) else None


def is_expired(snapshot: SavedSnapshot, now: datetime, retention: timedelta) -> bool:
    """Lazy-expiry rule applied on load."""
    return now - snapshot.saved_at > retention
