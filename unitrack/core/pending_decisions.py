"""Pending Decisions — tagged variants for questions the user must answer.

Invariants:
    - At most one decision is open at a time (engine.pending)
    - AwaitingRecovery and AwaitingLimit exist only while no session is active
    - AwaitingCancelConfirmation exists only while a session is active
"""

from dataclasses import dataclass
from datetime import timedelta

from unitrack.core.domain_types import DecisionKind, IssueKey
from unitrack.core.timer_snapshot import SavedSnapshot


@dataclass(frozen=True)
class AwaitingRecovery:
    """A live snapshot was found on Start: resume it or discard it."""
    snapshot: SavedSnapshot
    requested_limit: timedelta | None = None
    kind: DecisionKind = DecisionKind.RECOVERY

    @property
    def issue_key(self) -> IssueKey:
        return self.snapshot.issue_key


@dataclass(frozen=True)
class AwaitingLimit:
    """Limited-timer setup: waiting for the number of minutes."""
    issue_key: IssueKey
    kind: DecisionKind = DecisionKind.LIMIT


@dataclass(frozen=True)
class AwaitingCancelConfirmation:
    issue_key: IssueKey
    kind: DecisionKind = DecisionKind.CANCEL_CONFIRMATION


PendingDecision = AwaitingRecovery | AwaitingLimit | AwaitingCancelConfirmation
