"""Issue History Store — issue keys in first-seen order, deduplicated.

Invariants:
    - remember() inserts only unseen keys; returns True when a key was added
    - list_keys() returns keys ordered by first appearance
    - IO failures are logged; list_keys() degrades to [] and remember() to False
"""

import logging

from sqlalchemy import select

from unitrack.core.domain_types import IssueKey
from unitrack.core.errors import UnitrackError
from unitrack.infrastructure.database import DatabaseSessionManager
from unitrack.models.issue_history import IssueHistoryEntry

logger = logging.getLogger(__name__)


class SqlHistoryStore:
    """HistoryRepository over the local database."""

    def __init__(self, db: DatabaseSessionManager):
        self._db = db

    async def list_keys(self) -> list[str]:
        try:
            async with self._db.session() as session:
                result = await session.execute(
                    select(IssueHistoryEntry.issue_key).order_by(IssueHistoryEntry.id),
                )
                return list(result.scalars().all())
        except UnitrackError as e:
            logger.error(f"Failed to load history: {e.message}", extra={"error_code": e.code})
            return []

    async def remember(self, issue_key: IssueKey) -> bool:
        if not issue_key:
            return False
        try:
            async with self._db.session() as session:
                existing = await session.execute(
                    select(IssueHistoryEntry.id).where(
                        IssueHistoryEntry.issue_key == issue_key,
                    ),
                )
                if existing.scalar_one_or_none() is not None:
                    return False
                session.add(IssueHistoryEntry(issue_key=issue_key))
                await session.commit()
                return True
        except UnitrackError as e:
            logger.error(
                f"Failed to save history: {e.message}",
                extra={"issue_key": issue_key, "error_code": e.code},
            )
            return False
