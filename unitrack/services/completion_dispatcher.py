"""Completion Dispatcher — the completion sink: queue + background delivery worker.

Invariants:
    - publish() never blocks and never raises for delivery problems
    - Delivery (Linear post, notification) happens after the engine is already
      Idle; its outcome is only logged, never fed back into the timer
    - One worker drains the queue in order; a failed entry does not stop it
    - stop() gives queued entries a bounded grace period, then cancels
"""

import asyncio
import logging
from typing import Protocol

from unitrack.core.errors import TrackerAPIError
from unitrack.core.rounding import format_clock
from unitrack.core.timer_effects import CompletedEntry

logger = logging.getLogger(__name__)


class TimeEntryPoster(Protocol):
    @property
    def configured(self) -> bool: ...
    async def post_time_entry(self, issue_key: str, value: str) -> str | None: ...


class Notifier(Protocol):
    def notify(self, message: str) -> None: ...


class CompletionDispatcher:
    """CompletionSink backed by an asyncio.Queue."""

    def __init__(self, tracker: TimeEntryPoster, notifier: Notifier):
        self._tracker = tracker
        self._notifier = notifier
        self._queue: asyncio.Queue[CompletedEntry] = asyncio.Queue()
        self._worker: asyncio.Task | None = None

    @property
    def pending(self) -> int:
        return self._queue.qsize()

    def publish(self, entry: CompletedEntry) -> None:
        label = "AUTO-SUBMIT" if entry.auto else "SUBMIT"
        logger.info(
            f"{label} ISSUE: {entry.issue_key} TIME: {format_clock(entry.elapsed)} "
            f"CEIL: {entry.rounded}",
            extra={
                "issue_key": entry.issue_key,
                "elapsed": entry.elapsed.total_seconds(),
                "rounded": entry.rounded,
                "completion": entry.kind.value,
            },
        )
        self._queue.put_nowait(entry)

    def start(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = asyncio.create_task(self._run(), name="completion-dispatcher")

    async def stop(self, grace_seconds: float = 5.0) -> None:
        if self._worker is None:
            return
        try:
            await asyncio.wait_for(self._queue.join(), timeout=grace_seconds)
        except asyncio.TimeoutError:
            logger.warning(f"Dropping {self._queue.qsize()} undelivered time entries")
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            logger.info("Completion dispatcher stopped")
        self._worker = None

    async def deliver(self, entry: CompletedEntry) -> None:
        """Post one entry and notify. Failures are logged only."""
        if entry.auto:
            self._notifier.notify(
                f"Timer for {entry.issue_key} completed. Time logged: {entry.rounded}",
            )
        if not self._tracker.configured:
            logger.warning(
                "Linear API key not configured; time entry not posted",
                extra={"issue_key": entry.issue_key},
            )
            return
        try:
            await self._tracker.post_time_entry(entry.issue_key, entry.rounded)
        except TrackerAPIError as e:
            logger.error(
                f"Posting {entry.rounded} for {entry.issue_key} failed: {e.message}",
                extra={"issue_key": entry.issue_key, "error_code": e.code},
            )

    async def _run(self) -> None:
        while True:
            entry = await self._queue.get()
            try:
                await self.deliver(entry)
            except Exception as e:
                logger.error(
                    f"Unexpected error delivering time entry: {e}",
                    exc_info=True,
                    extra={"issue_key": entry.issue_key},
                )
            finally:
                self._queue.task_done()
