"""Timer Session — the live stopwatch bookkeeping owned by the engine.

Invariants:
    - accumulated_pause >= 0 and only grows while the session lives
    - pause_instant is set iff state == PAUSED
    - elapsed is clamped to [0, limit] (limit only when bounded)
    - elapsed is recomputed only while RUNNING; frozen while PAUSED

Design Decisions:
    - Pure dataclass, no IO: the engine passes `now` into every method
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from unitrack.core.domain_types import IssueKey, TimerState

_ZERO = timedelta(0)


@dataclass
class TimerSession:
    """One stopwatch run for a single issue."""

    issue_key: IssueKey
    start_instant: datetime
    state: TimerState = TimerState.RUNNING
    pause_instant: datetime | None = None
    accumulated_pause: timedelta = _ZERO
    elapsed: timedelta = _ZERO
    limit: timedelta | None = None

    @property
    def bounded(self) -> bool:
        return self.limit is not None

    @property
    def limit_reached(self) -> bool:
        return self.limit is not None and self.elapsed >= self.limit

    @property
    def progress(self) -> float | None:
        """Fraction of the limit used (bounded sessions only)."""
        if self.limit is None:
            return None
        return min(self.elapsed / self.limit, 1.0)

    def measure(self, now: datetime) -> timedelta:
        """Recompute elapsed from the wall clock. Frozen while paused."""
        if self.state == TimerState.RUNNING:
            self.elapsed = self._clamp(now - self.start_instant - self.accumulated_pause)
        return self.elapsed

    def pause(self, now: datetime) -> None:
        self.measure(now)
        self.state = TimerState.PAUSED
        self.pause_instant = now

    def resume(self, now: datetime) -> None:
        if self.pause_instant is not None:
            self.accumulated_pause += max(now - self.pause_instant, _ZERO)
        self.pause_instant = None
        self.state = TimerState.RUNNING
        self.measure(now)

    def _clamp(self, value: timedelta) -> timedelta:
        value = max(value, _ZERO)
        if self.limit is not None:
            value = min(value, self.limit)
        return value
