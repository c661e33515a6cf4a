"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - Implementations provided by shell via dependency injection
    - Store methods never raise for IO failures: they log and degrade
      (save -> False, load -> None, delete -> no-op)

Design Decisions:
    - Protocol over ABC: structural subtyping, fakes in tests need no base class
    - Async in Protocol: implementations do IO; the engine itself stays sync
"""

from datetime import datetime, timedelta
from typing import Callable, Protocol

from unitrack.core.domain_types import IssueKey
from unitrack.core.timer_effects import CompletedEntry
from unitrack.core.timer_snapshot import SavedSnapshot

Clock = Callable[[], datetime]


class SnapshotRepository(Protocol):
    """Recovery Store contract — keyed by sanitized issue key."""
    async def save(
        self,
        issue_key: IssueKey,
        elapsed: timedelta,
        start_instant: datetime,
        accumulated_pause: timedelta,
        limited: bool,
        limit: timedelta,
    ) -> bool: ...
    async def load(self, issue_key: IssueKey) -> SavedSnapshot | None: ...
    async def delete(self, issue_key: IssueKey) -> None: ...


class HistoryRepository(Protocol):
    """Issue history contract — first-seen order, no duplicates."""
    async def list_keys(self) -> list[str]: ...
    async def remember(self, issue_key: IssueKey) -> bool: ...


class CompletionSink(Protocol):
    """Receives finished sessions. publish() must not block."""
    def publish(self, entry: CompletedEntry) -> None: ...
