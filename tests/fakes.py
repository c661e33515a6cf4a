"""In-memory test doubles for the boundary protocols and the clock."""

import asyncio
from datetime import datetime, timedelta, timezone

from unitrack.core.timer_effects import CompletedEntry
from unitrack.core.timer_snapshot import SavedSnapshot, is_expired

T0 = datetime(2026, 3, 2, 9, 0, tzinfo=timezone.utc)


class FakeClock:
    """Manually advanced clock; call it to read the current instant."""

    def __init__(self, start: datetime = T0):
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> datetime:
        self.now += timedelta(**kwargs)
        return self.now


class MemorySnapshotStore:
    def __init__(self, clock: FakeClock, retention: timedelta = timedelta(days=5)):
        self.clock = clock
        self.retention = retention
        self.rows: dict[str, SavedSnapshot] = {}
        self.saves = 0
        self.save_delay = 0.0
        self.load_delay = 0.0

    async def save(self, issue_key, elapsed, start_instant, accumulated_pause, limited, limit):
        if self.save_delay:
            await asyncio.sleep(self.save_delay)
        self.saves += 1
        self.rows[issue_key] = SavedSnapshot(
            issue_key=issue_key,
            elapsed_at_save=elapsed,
            start_instant=start_instant,
            accumulated_pause=accumulated_pause,
            saved_at=self.clock(),
            limited=limited,
            limit=limit,
        )
        return True

    async def load(self, issue_key):
        if self.load_delay:
            await asyncio.sleep(self.load_delay)
        snapshot = self.rows.get(issue_key)
        if snapshot is None:
            return None
        if is_expired(snapshot, self.clock(), self.retention):
            del self.rows[issue_key]
            return None
        return snapshot

    async def delete(self, issue_key):
        self.rows.pop(issue_key, None)


class MemoryHistoryStore:
    def __init__(self):
        self.keys: list[str] = []

    async def list_keys(self):
        return list(self.keys)

    async def remember(self, issue_key):
        if not issue_key or issue_key in self.keys:
            return False
        self.keys.append(issue_key)
        return True


class RecordingSink:
    def __init__(self):
        self.entries: list[CompletedEntry] = []

    def publish(self, entry: CompletedEntry) -> None:
        self.entries.append(entry)
