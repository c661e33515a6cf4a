"""Timer route tests — HTTP surface of the timer lifecycle.

Invariants:
    - Bare issue numbers are qualified with the configured prefix
    - Domain errors surface as their envelope with 400 / 409
    - Every successful call returns the status view
"""

from datetime import timedelta

from tests.fakes import T0

API = "/api/v1/timer"


async def test_idle_status_view(client):
    response = await client.get(API)
    assert response.status_code == 200
    assert response.json() == {
        "state": "idle",
        "issue_key": None,
        "elapsed_seconds": 0.0,
        "elapsed": "00:00:00",
        "limit_seconds": None,
        "progress": None,
        "rounded_preview": "0:00",
        "pending": None,
    }


async def test_start_normalizes_issue_key(client, clock):
    response = await client.post(f"{API}/start", json={"issue_key": "1234"})
    assert response.status_code == 200
    assert response.json()["issue_key"] == "UE-1234"
    assert response.json()["state"] == "running"

    clock.advance(minutes=16)
    view = (await client.get(API)).json()
    assert view["elapsed"] == "00:16:00"
    assert view["rounded_preview"] == "0:30"


async def test_empty_issue_key_is_400(client):
    response = await client.post(f"{API}/start", json={"issue_key": "   "})
    assert response.status_code == 400
    body = response.json()["error"]
    assert body["code"] == "EMPTY_ISSUE_KEY"
    assert body["message"] == "Issue ID cannot be empty."


async def test_missing_body_field_is_validation_error(client):
    response = await client.post(f"{API}/start", json={})
    assert response.status_code == 400
    body = response.json()["error"]
    assert body["code"] == "VALIDATION_ERROR"
    assert body["details"][0]["field"] == "body.issue_key"


async def test_second_start_is_409(client):
    await client.post(f"{API}/start", json={"issue_key": "UE-1"})
    response = await client.post(f"{API}/start", json={"issue_key": "UE-2"})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "TIMER_BUSY"


async def test_recovery_flow(client, snapshots, clock):
    await snapshots.save(
        "UE-7", timedelta(minutes=7), T0 - timedelta(minutes=7),
        timedelta(0), False, timedelta(0),
    )
    clock.advance(hours=2)

    view = (await client.post(f"{API}/start", json={"issue_key": "7"})).json()
    assert view["state"] == "idle"
    assert view["pending"]["kind"] == "recovery"
    assert view["pending"]["issue_key"] == "UE-7"
    assert view["pending"]["elapsed_at_save"] == 420.0

    blocked = await client.post(f"{API}/pause")
    assert blocked.status_code == 409
    assert blocked.json()["error"]["code"] == "DECISION_PENDING"

    view = (await client.post(f"{API}/recovery", json={"resume": True})).json()
    assert view["state"] == "running"
    assert view["elapsed"] == "00:07:00"
    assert view["pending"] is None


async def test_recovery_without_pending_is_409(client):
    response = await client.post(f"{API}/recovery", json={"resume": True})
    assert response.status_code == 409
    assert response.json()["error"]["code"] == "NO_PENDING_DECISION"


async def test_pause_resume_submit(client, clock, sink):
    await client.post(f"{API}/start", json={"issue_key": "UE-1"})
    clock.advance(minutes=5)
    assert (await client.post(f"{API}/pause")).json()["state"] == "paused"
    clock.advance(minutes=30)
    assert (await client.post(f"{API}/resume")).json()["state"] == "running"
    clock.advance(minutes=5)

    body = (await client.post(f"{API}/submit")).json()
    assert body["entry"]["issue_key"] == "UE-1"
    assert body["entry"]["elapsed"] == "00:10:00"
    assert body["entry"]["rounded"] == "0:15"
    assert body["entry"]["kind"] == "manual"
    assert body["timer"]["state"] == "idle"
    assert len(sink.entries) == 1


async def test_submit_when_idle_returns_null_entry(client):
    body = (await client.post(f"{API}/submit")).json()
    assert body["entry"] is None
    assert body["timer"]["state"] == "idle"


async def test_limited_timer_setup(client):
    view = (await client.post(f"{API}/limit-setup", json={"issue_key": "5"})).json()
    assert view["pending"] == {
        "kind": "limit", "issue_key": "UE-5", "elapsed_at_save": None,
        "saved_at": None, "limited": None, "limit_seconds": None,
    }

    bad = await client.post(f"{API}/limit", json={"minutes": 0})
    assert bad.status_code == 400
    assert bad.json()["error"]["code"] == "INVALID_LIMIT"

    view = (await client.post(f"{API}/limit", json={"minutes": 30})).json()
    assert view["state"] == "running"
    assert view["limit_seconds"] == 1800.0
    assert view["progress"] == 0.0


async def test_abort_limit_setup(client):
    await client.post(f"{API}/limit-setup", json={"issue_key": "5"})
    view = (await client.delete(f"{API}/limit-setup")).json()
    assert view["pending"] is None
    assert view["state"] == "idle"


async def test_cancel_requires_confirmation(client, sink):
    await client.post(f"{API}/start", json={"issue_key": "UE-1"})
    view = (await client.post(f"{API}/cancel")).json()
    assert view["pending"]["kind"] == "cancel_confirmation"

    view = (await client.post(f"{API}/cancel/confirm", json={"confirm": False})).json()
    assert view["state"] == "running"

    await client.post(f"{API}/cancel")
    view = (await client.post(f"{API}/cancel/confirm", json={"confirm": True})).json()
    assert view["state"] == "idle"
    assert sink.entries == []


async def test_history_lists_started_issues(client):
    await client.post(f"{API}/start", json={"issue_key": "UE-1"})
    await client.post(f"{API}/submit")
    await client.post(f"{API}/start", json={"issue_key": "2"})

    response = await client.get("/api/v1/history")
    assert response.json() == {"issues": ["UE-1", "UE-2"]}
