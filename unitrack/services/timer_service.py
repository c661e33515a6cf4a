"""Timer Service — imperative shell around the TimerEngine.

Invariants:
    - Every engine mutation (API request or tick) runs under one asyncio.Lock:
      no two transitions interleave, even across awaits on the store
    - Start consults the Recovery Store BEFORE the engine may create a session
    - Store calls are awaited with a timeout; a slow or failed write is logged
      and skipped, the live session is unaffected
    - A snapshot load that times out counts as no saved timer
    - Completed entries go to the sink via publish() (not awaited)

Design Decisions:
    - Engine returns effects, service applies them in order (functional core,
      imperative shell)
    - Tick loop is a plain asyncio task owned by the service; FastAPI lifespan
      starts and stops it
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from unitrack.core.domain_types import IssueKey
from unitrack.core.repository_protocols import (
    Clock, CompletionSink, HistoryRepository, SnapshotRepository,
)
from unitrack.core.timer_effects import (
    CompletedEntry, DeleteSnapshot, RememberIssue, SaveSnapshot, TimerEffect,
)
from unitrack.core.timer_engine import TimerEngine, TimerStatus
from unitrack.infrastructure.clock import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")


class TimerService:
    """Serializes user actions and ticks into the engine and applies effects."""

    def __init__(
        self,
        engine: TimerEngine,
        snapshots: SnapshotRepository,
        history: HistoryRepository,
        sink: CompletionSink,
        clock: Clock = utc_now,
        save_timeout_seconds: float = 2.0,
    ):
        self.engine = engine
        self._snapshots = snapshots
        self._history = history
        self._sink = sink
        self._clock = clock
        self._save_timeout = save_timeout_seconds
        self._lock = asyncio.Lock()
        self._tick_task: asyncio.Task | None = None

    # --- Start / recovery ----------------------------------------------------

    async def start(self, issue_key: IssueKey) -> TimerStatus:
        async with self._lock:
            self.engine.check_can_start(issue_key)
            snapshot = await self._bounded(self._snapshots.load(issue_key), "load", issue_key)
            effects = self.engine.request_start(issue_key, self._clock(), snapshot)
            await self._apply(effects)
            if self.engine.pending is not None:
                logger.info("Found saved timer, awaiting decision", extra={"issue_key": issue_key})
            return self._status()

    async def resolve_recovery(self, resume: bool) -> TimerStatus:
        async with self._lock:
            await self._apply(self.engine.resolve_recovery(resume, self._clock()))
            return self._status()

    async def begin_limit_setup(self, issue_key: IssueKey) -> TimerStatus:
        async with self._lock:
            self.engine.begin_limit_setup(issue_key)
            return self._status()

    async def apply_limit(self, minutes: int) -> TimerStatus:
        async with self._lock:
            issue_key, limit = self.engine.apply_limit(minutes)
            snapshot = await self._bounded(self._snapshots.load(issue_key), "load", issue_key)
            effects = self.engine.request_start(issue_key, self._clock(), snapshot, limit)
            await self._apply(effects)
            return self._status()

    async def abort_limit_setup(self) -> TimerStatus:
        async with self._lock:
            self.engine.abort_limit_setup()
            return self._status()

    # --- Running transitions -------------------------------------------------

    async def pause(self) -> TimerStatus:
        async with self._lock:
            self.engine.pause(self._clock())
            return self._status()

    async def resume(self) -> TimerStatus:
        async with self._lock:
            self.engine.resume(self._clock())
            return self._status()

    async def submit(self) -> tuple[CompletedEntry | None, TimerStatus]:
        async with self._lock:
            entry = await self._apply(self.engine.submit(self._clock()))
            return entry, self._status()

    async def request_cancel(self) -> TimerStatus:
        async with self._lock:
            self.engine.request_cancel()
            return self._status()

    async def confirm_cancel(self, confirmed: bool) -> TimerStatus:
        async with self._lock:
            issue_key = self.engine.session.issue_key if self.engine.session else None
            await self._apply(self.engine.confirm_cancel(confirmed))
            if confirmed:
                logger.info("Timer cancelled", extra={"issue_key": issue_key})
            return self._status()

    async def tick(self) -> TimerStatus:
        async with self._lock:
            await self._apply(self.engine.tick(self._clock()))
            return self._status()

    async def status(self) -> TimerStatus:
        async with self._lock:
            return self._status()

    async def history(self) -> list[str]:
        return await self._history.list_keys()

    # --- Tick loop -----------------------------------------------------------

    def start_ticking(self, interval_seconds: float = 1.0) -> None:
        if self._tick_task is None or self._tick_task.done():
            self._tick_task = asyncio.create_task(
                self._run_ticks(interval_seconds), name="timer-ticks",
            )

    async def stop_ticking(self) -> None:
        if self._tick_task is None:
            return
        self._tick_task.cancel()
        try:
            await self._tick_task
        except asyncio.CancelledError:
            logger.info("Tick loop stopped")
        self._tick_task = None

    async def _run_ticks(self, interval_seconds: float) -> None:
        while True:
            await asyncio.sleep(interval_seconds)
            try:
                await self.tick()
            except Exception as e:
                logger.error(f"Tick failed: {e}", exc_info=True)

    # --- Effects -------------------------------------------------------------

    async def _apply(self, effects: list[TimerEffect]) -> CompletedEntry | None:
        completed = None
        for effect in effects:
            if isinstance(effect, SaveSnapshot):
                await self._bounded(
                    self._snapshots.save(
                        effect.issue_key, effect.elapsed, effect.start_instant,
                        effect.accumulated_pause, effect.limited, effect.limit,
                    ),
                    "save", effect.issue_key,
                )
            elif isinstance(effect, DeleteSnapshot):
                await self._bounded(
                    self._snapshots.delete(effect.issue_key), "delete", effect.issue_key,
                )
            elif isinstance(effect, RememberIssue):
                await self._bounded(
                    self._history.remember(effect.issue_key), "remember", effect.issue_key,
                )
            elif isinstance(effect, CompletedEntry):
                self._sink.publish(effect)
                completed = effect
        return completed

    async def _bounded(self, call: Awaitable[T], operation: str, issue_key: str) -> T | None:
        try:
            return await asyncio.wait_for(call, timeout=self._save_timeout)
        except asyncio.TimeoutError:
            logger.error(
                f"Snapshot {operation} timed out after {self._save_timeout}s; skipped",
                extra={"issue_key": issue_key, "operation": operation},
            )
            return None

    def _status(self) -> TimerStatus:
        return self.engine.status(self._clock())
