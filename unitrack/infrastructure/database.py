"""Database Session Manager — async SQLite engine with automatic rollback and health checks.

Invariants:
    - Every session auto-rolls-back on exception (no partial commits leak)
    - All SQLAlchemy exceptions mapped to PersistenceError (core/errors.py)
    - The SQLite file's parent directory exists before the engine connects
    - create_schema() is idempotent (checkfirst) and runs once at startup

Design Decisions:
    - Singleton db_manager initialized on startup: FastAPI lifespan manages lifecycle
    - expire_on_commit=False: prevents lazy-load issues in async context
    - metadata.create_all instead of migrations: the database is a per-user
      local file with two tables
"""

import logging
from contextlib import asynccontextmanager
from pathlib import Path
from typing import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.engine import make_url
from sqlalchemy.exc import (
    DBAPIError, IntegrityError, OperationalError, SQLAlchemyError,
)
from sqlalchemy.ext.asyncio import (
    AsyncSession, async_sessionmaker, create_async_engine,
)

import unitrack.models  # noqa: F401  (populate Base.metadata)
from unitrack.core.errors import PersistenceError
from unitrack.db.base import Base

logger = logging.getLogger(__name__)

# Most specific first: IntegrityError and OperationalError are DBAPIError subclasses.
_ERROR_KINDS: tuple[tuple[type[SQLAlchemyError], str, str], ...] = (
    (IntegrityError, "constraint violated", "commit"),
    (OperationalError, "database locked or unreadable", "execute"),
    (DBAPIError, "sqlite driver error", "query"),
)


def _describe(error: SQLAlchemyError) -> tuple[str, str]:
    for kind, message, operation in _ERROR_KINDS:
        if isinstance(error, kind):
            return message, operation
    return "database operation failed", "unknown"


def ensure_sqlite_parent(database_url: str) -> None:
    url = make_url(database_url)
    if url.get_backend_name() == "sqlite" and url.database not in (None, "", ":memory:"):
        Path(url.database).expanduser().parent.mkdir(parents=True, exist_ok=True)


class DatabaseSessionManager:
    """Manages async database sessions with rollback and health checks."""

    def __init__(self, database_url: str):
        ensure_sqlite_parent(database_url)
        self.engine = create_async_engine(database_url, pool_pre_ping=True)
        self._session_factory = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False,
        )

    @asynccontextmanager
    async def session(self) -> AsyncGenerator[AsyncSession, None]:
        """Provide session with auto-rollback on exception."""
        session = self._session_factory()
        try:
            yield session
        except SQLAlchemyError as e:
            await session.rollback()
            message, operation = _describe(e)
            logger.error(f"SQLite {operation} failed: {e}")
            raise PersistenceError(message, operation) from e
        finally:
            await session.close()

    async def create_schema(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            async with self.session() as db:
                await db.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False

    async def dispose(self) -> None:
        await self.engine.dispose()


# Singleton (initialized on startup)
db_manager: DatabaseSessionManager | None = None


def init_db(database_url: str) -> DatabaseSessionManager:
    global db_manager
    db_manager = DatabaseSessionManager(database_url)
    return db_manager
