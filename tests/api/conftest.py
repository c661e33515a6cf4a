"""API test fixtures — FastAPI app with an in-memory TimerService.

Invariants:
    - get_timer_service overridden; the lifespan (real database, Linear client,
      tick loop) never runs under ASGITransport
    - Ticks are driven explicitly through the service, with a FakeClock
"""

import pytest
from httpx import ASGITransport, AsyncClient

from tests.fakes import FakeClock, MemoryHistoryStore, MemorySnapshotStore, RecordingSink
from unitrack.api.dependencies import get_timer_service
from unitrack.core.timer_engine import TimerEngine
from unitrack.main import app
from unitrack.services.timer_service import TimerService


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def snapshots(clock):
    return MemorySnapshotStore(clock)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def service(clock, snapshots, sink):
    return TimerService(TimerEngine(), snapshots, MemoryHistoryStore(), sink, clock=clock)


@pytest.fixture
async def client(service):
    app.dependency_overrides[get_timer_service] = lambda: service
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
    app.dependency_overrides.clear()
