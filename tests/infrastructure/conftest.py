"""Infrastructure fixtures — a real SQLite file per test."""

import pytest

from unitrack.infrastructure.database import DatabaseSessionManager
from tests.fakes import FakeClock


@pytest.fixture
async def db(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'unitrack.db'}")
    await manager.create_schema()
    yield manager
    await manager.dispose()


@pytest.fixture
async def db_without_schema(tmp_path):
    manager = DatabaseSessionManager(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    yield manager
    await manager.dispose()


@pytest.fixture
def clock():
    return FakeClock()
