"""Timer Engine — the stopwatch state machine (Idle / Running / Paused).

Invariants:
    - All methods are PURE with respect to IO: `now` comes in, effects go out
    - Start never creates a session while a live snapshot is unresolved; the
      caller loads the snapshot first and passes it in
    - Ticks are no-ops unless RUNNING; no time accrues while PAUSED
    - Auto-complete fires at most once per bounded session
    - Pause when not RUNNING, Resume when not PAUSED, Submit/Cancel when Idle
      are no-ops
    - While a decision is pending only its resolver (and ticks) are accepted

Design Decisions:
    - Effects returned as values (SaveSnapshot, DeleteSnapshot, RememberIssue,
      CompletedEntry) so the shell decides how to await or enqueue them
    - Pending decisions are tagged variants in a single `pending` slot instead
      of per-screen boolean flags
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from unitrack.core.domain_types import (
    SAVE_INTERVAL, CompletionKind, IssueKey, TimerState,
)
from unitrack.core.errors import (
    DecisionPendingError, EmptyIssueKeyError, ErrorContext,
    InvalidLimitError, NoPendingDecisionError, TimerBusyError,
)
from unitrack.core.pending_decisions import (
    AwaitingCancelConfirmation, AwaitingLimit, AwaitingRecovery, PendingDecision,
)
from unitrack.core.rounding import ceil_to_quarter
from unitrack.core.timer_effects import (
    CompletedEntry, DeleteSnapshot, RememberIssue, SaveSnapshot, TimerEffect,
)
from unitrack.core.timer_session import TimerSession
from unitrack.core.timer_snapshot import SavedSnapshot


@dataclass(frozen=True)
class TimerStatus:
    """Read-only view of the engine for rendering."""
    state: TimerState
    issue_key: IssueKey | None = None
    elapsed: timedelta = timedelta(0)
    limit: timedelta | None = None
    progress: float | None = None
    rounded_minutes: int = 0
    pending: PendingDecision | None = None


class TimerEngine:
    """Single-owner stopwatch. Not thread-safe: callers serialize access."""

    def __init__(self, save_interval: timedelta = SAVE_INTERVAL):
        self.save_interval = save_interval
        self.session: TimerSession | None = None
        self.pending: PendingDecision | None = None
        self._last_save: datetime | None = None

    @property
    def state(self) -> TimerState:
        return self.session.state if self.session else TimerState.IDLE

    # --- Start / recovery ----------------------------------------------------

    def check_can_start(self, issue_key: str) -> None:
        """Raise if Start(issue_key) would be rejected. No state change."""
        self._ensure_no_pending()
        if self.session is not None:
            raise TimerBusyError(self.session.issue_key)
        if not issue_key:
            raise EmptyIssueKeyError()

    def request_start(
        self,
        issue_key: IssueKey,
        now: datetime,
        snapshot: SavedSnapshot | None = None,
        limit: timedelta | None = None,
    ) -> list[TimerEffect]:
        """Start a session, or defer to the recovery decision if a snapshot is live."""
        self.check_can_start(issue_key)
        if limit is not None and limit <= timedelta(0):
            raise InvalidLimitError(limit, ErrorContext(issue_key=issue_key))
        if snapshot is not None:
            self.pending = AwaitingRecovery(snapshot=snapshot, requested_limit=limit)
            return []
        return self._begin(issue_key, now, limit)

    def resolve_recovery(self, resume: bool, now: datetime) -> list[TimerEffect]:
        """Resume from the saved snapshot, or discard it and start fresh."""
        decision = self.pending
        if not isinstance(decision, AwaitingRecovery):
            raise NoPendingDecisionError("recovery")
        self.pending = None
        snapshot = decision.snapshot
        if not resume:
            return [
                DeleteSnapshot(snapshot.issue_key),
                *self._begin(snapshot.issue_key, now, decision.requested_limit),
            ]
        self.session = TimerSession(
            issue_key=snapshot.issue_key,
            start_instant=now - snapshot.elapsed_at_save,
            elapsed=snapshot.elapsed_at_save,
            limit=snapshot.effective_limit,
        )
        self.session.measure(now)
        self._last_save = now
        return [RememberIssue(snapshot.issue_key)]

    # --- Limited setup -------------------------------------------------------

    def begin_limit_setup(self, issue_key: IssueKey) -> None:
        self.check_can_start(issue_key)
        self.pending = AwaitingLimit(issue_key=issue_key)

    def apply_limit(self, minutes: int) -> tuple[IssueKey, timedelta]:
        """Close the limit decision; the caller then runs request_start.

        An invalid value leaves the decision open.
        """
        decision = self.pending
        if not isinstance(decision, AwaitingLimit):
            raise NoPendingDecisionError("limit")
        if isinstance(minutes, bool) or not isinstance(minutes, int) or minutes <= 0:
            raise InvalidLimitError(minutes, ErrorContext(issue_key=decision.issue_key))
        self.pending = None
        return decision.issue_key, timedelta(minutes=minutes)

    def abort_limit_setup(self) -> bool:
        if not isinstance(self.pending, AwaitingLimit):
            return False
        self.pending = None
        return True

    # --- Running transitions -------------------------------------------------

    def pause(self, now: datetime) -> bool:
        self._ensure_no_pending()
        if self.session is None or self.session.state != TimerState.RUNNING:
            return False
        self.session.pause(now)
        return True

    def resume(self, now: datetime) -> bool:
        self._ensure_no_pending()
        if self.session is None or self.session.state != TimerState.PAUSED:
            return False
        self.session.resume(now)
        return True

    def tick(self, now: datetime) -> list[TimerEffect]:
        session = self.session
        if session is None or session.state != TimerState.RUNNING:
            return []
        session.measure(now)
        if session.limit_reached:
            return self._complete(now, CompletionKind.AUTO)
        if self._last_save is None or now - self._last_save >= self.save_interval:
            self._last_save = now
            return [SaveSnapshot(
                issue_key=session.issue_key,
                elapsed=session.elapsed,
                start_instant=session.start_instant,
                accumulated_pause=session.accumulated_pause,
                limited=session.bounded,
                limit=session.limit or timedelta(0),
            )]
        return []

    def submit(self, now: datetime) -> list[TimerEffect]:
        self._ensure_no_pending()
        if self.session is None:
            return []
        return self._complete(now, CompletionKind.MANUAL)

    # --- Cancel --------------------------------------------------------------

    def request_cancel(self) -> bool:
        """Open the cancel confirmation. False when there is nothing to cancel."""
        if isinstance(self.pending, AwaitingCancelConfirmation):
            return True
        self._ensure_no_pending()
        if self.session is None:
            return False
        self.pending = AwaitingCancelConfirmation(issue_key=self.session.issue_key)
        return True

    def confirm_cancel(self, confirmed: bool) -> list[TimerEffect]:
        if not isinstance(self.pending, AwaitingCancelConfirmation):
            raise NoPendingDecisionError("cancel_confirmation")
        self.pending = None
        return self.cancel() if confirmed else []

    def cancel(self) -> list[TimerEffect]:
        """Discard the session and its snapshot."""
        if self.session is None:
            return []
        issue_key = self.session.issue_key
        self._clear()
        return [DeleteSnapshot(issue_key)]

    # --- View ----------------------------------------------------------------

    def status(self, now: datetime) -> TimerStatus:
        session = self.session
        if session is None:
            return TimerStatus(state=TimerState.IDLE, pending=self.pending)
        elapsed = session.measure(now)
        return TimerStatus(
            state=session.state,
            issue_key=session.issue_key,
            elapsed=elapsed,
            limit=session.limit,
            progress=session.progress,
            rounded_minutes=ceil_to_quarter(elapsed),
            pending=self.pending,
        )

    # --- Internals -----------------------------------------------------------

    def _begin(
        self, issue_key: IssueKey, now: datetime, limit: timedelta | None,
    ) -> list[TimerEffect]:
        self.session = TimerSession(
            issue_key=issue_key, start_instant=now, limit=limit,
        )
        self._last_save = now
        return [RememberIssue(issue_key)]

    def _complete(self, now: datetime, kind: CompletionKind) -> list[TimerEffect]:
        session = self.session
        assert session is not None
        elapsed = session.measure(now)
        entry = CompletedEntry(
            issue_key=session.issue_key,
            elapsed=elapsed,
            rounded_minutes=ceil_to_quarter(elapsed),
            kind=kind,
            completed_at=now,
        )
        self._clear()
        return [DeleteSnapshot(entry.issue_key), entry]

    def _clear(self) -> None:
        self.session = None
        self._last_save = None
        if isinstance(self.pending, AwaitingCancelConfirmation):
            self.pending = None

    def _ensure_no_pending(self) -> None:
        if self.pending is not None:
            raise DecisionPendingError(self.pending.kind.value)
