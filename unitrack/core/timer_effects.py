"""Timer Effects — side effects requested by the engine, applied by the shell.

Invariants:
    - Effects are immutable values; the engine never performs them itself
    - Order inside a returned list is the order the shell must apply them
    - CompletedEntry is emitted at most once per session
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from unitrack.core.domain_types import CompletionKind, IssueKey
from unitrack.core.rounding import format_quarter


@dataclass(frozen=True)
class SaveSnapshot:
    """Upsert the recovery snapshot for a running session."""
    issue_key: IssueKey
    elapsed: timedelta
    start_instant: datetime
    accumulated_pause: timedelta
    limited: bool
    limit: timedelta


@dataclass(frozen=True)
class DeleteSnapshot:
    issue_key: IssueKey


@dataclass(frozen=True)
class RememberIssue:
    issue_key: IssueKey


@dataclass(frozen=True)
class CompletedEntry:
    """A finished session, ready for the completion sink."""
    issue_key: IssueKey
    elapsed: timedelta
    rounded_minutes: int
    kind: CompletionKind
    completed_at: datetime

    @property
    def rounded(self) -> str:
        return format_quarter(self.rounded_minutes)

    @property
    def auto(self) -> bool:
        return self.kind == CompletionKind.AUTO


TimerEffect = SaveSnapshot | DeleteSnapshot | RememberIssue | CompletedEntry
