"""Recovery Store — SQLite-backed snapshots of in-progress timers.

Invariants:
    - save() is an idempotent upsert keyed by storage_key(issue_key); saved_at = clock()
    - load() returns None for missing, corrupt, or expired rows; expired rows are
      deleted as a side effect (lazy expiry, no background sweep)
    - load() only returns a snapshot whose issue_key is the requested key; a row
      shared through storage_key with another issue is left in place
    - delete() is idempotent; absence is not an error
    - No method raises on IO failure: errors are logged and degrade to
      "save skipped" / "no snapshot" / "nothing deleted"
"""

import logging
from datetime import datetime, timedelta

from pydantic import ValidationError
from sqlalchemy import delete as sql_delete

from unitrack.core.domain_types import IssueKey
from unitrack.core.errors import UnitrackError
from unitrack.core.issue_keys import storage_key
from unitrack.core.repository_protocols import Clock
from unitrack.core.timer_snapshot import SavedSnapshot, is_expired
from unitrack.infrastructure.clock import utc_now
from unitrack.infrastructure.database import DatabaseSessionManager
from unitrack.models.saved_timer import SavedTimer
from unitrack.schemas.snapshot import SnapshotRecord

logger = logging.getLogger(__name__)


class SqlSnapshotStore:
    """SnapshotRepository over the local database."""

    def __init__(
        self,
        db: DatabaseSessionManager,
        retention: timedelta,
        clock: Clock = utc_now,
    ):
        self._db = db
        self.retention = retention
        self._clock = clock

    async def save(
        self,
        issue_key: IssueKey,
        elapsed: timedelta,
        start_instant: datetime,
        accumulated_pause: timedelta,
        limited: bool,
        limit: timedelta,
    ) -> bool:
        key = storage_key(issue_key)
        try:
            async with self._db.session() as session:
                row = await session.get(SavedTimer, key)
                if row is None:
                    row = SavedTimer(storage_key=key)
                    session.add(row)
                row.issue_key = issue_key
                row.elapsed_seconds = elapsed.total_seconds()
                row.start_instant = start_instant
                row.accumulated_pause_seconds = accumulated_pause.total_seconds()
                row.saved_at = self._clock()
                row.limited = limited
                row.limit_seconds = limit.total_seconds()
                await session.commit()
        except UnitrackError as e:
            logger.error(
                f"Failed to save timer: {e.message}",
                extra={"issue_key": issue_key, "error_code": e.code},
            )
            return False
        logger.debug("Saved timer snapshot", extra={"issue_key": issue_key})
        return True

    async def load(self, issue_key: IssueKey) -> SavedSnapshot | None:
        try:
            async with self._db.session() as session:
                row = await session.get(SavedTimer, storage_key(issue_key))
        except UnitrackError as e:
            logger.error(
                f"Failed to read saved timer: {e.message}",
                extra={"issue_key": issue_key, "error_code": e.code},
            )
            return None
        if row is None:
            return None
        if row.issue_key != issue_key:
            logger.warning(
                f"Saved timer row belongs to {row.issue_key}; not offered",
                extra={"issue_key": issue_key},
            )
            return None

        try:
            snapshot = SnapshotRecord.model_validate(row).to_snapshot()
        except ValidationError as e:
            logger.error(
                f"Failed to decode saved timer: {e.error_count()} invalid field(s)",
                extra={"issue_key": issue_key, "error_code": "SNAPSHOT_CORRUPT"},
            )
            return None

        if is_expired(snapshot, self._clock(), self.retention):
            logger.info("Discarding expired saved timer", extra={"issue_key": issue_key})
            await self.delete(issue_key)
            return None
        return snapshot

    async def delete(self, issue_key: IssueKey) -> None:
        try:
            async with self._db.session() as session:
                await session.execute(
                    sql_delete(SavedTimer).where(
                        SavedTimer.storage_key == storage_key(issue_key),
                    ),
                )
                await session.commit()
        except UnitrackError as e:
            logger.error(
                f"Failed to delete saved timer: {e.message}",
                extra={"issue_key": issue_key, "error_code": e.code},
            )
