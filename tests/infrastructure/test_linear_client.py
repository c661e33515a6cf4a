"""ResilientLinearClient tests — retry policy and error mapping over httpx.MockTransport.

Invariants:
    - 5xx and transport errors retry up to max_retries, then raise connection_error
    - 429 retries and raises rate_limit once exhausted
    - Other 4xx, GraphQL errors, and success=false fail immediately
    - The issue key and value travel as GraphQL variables

Design Decisions:
    - base_delay_ms=0 so retries do not sleep
"""

import json

import httpx
import pytest

from unitrack.core.errors import TrackerAPIError
from unitrack.infrastructure.linear_client import ResilientLinearClient

_OK = {"data": {"commentCreate": {"success": True, "comment": {"id": "c-1"}}}}


def _client(handler, **kwargs) -> ResilientLinearClient:
    return ResilientLinearClient(
        api_key="lin_api_test",
        base_delay_ms=0,
        transport=httpx.MockTransport(handler),
        **kwargs,
    )


def _scripted(*responses):
    """Handler that replays responses in order and records requests."""
    seen = []
    queue = list(responses)

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        item = queue.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    return handler, seen


async def test_success_returns_comment_id_and_sends_variables():
    handler, seen = _scripted(httpx.Response(200, json=_OK))
    client = _client(handler)

    assert await client.post_time_entry("UE-12", "0:45") == "c-1"

    request = seen[0]
    assert request.headers["Authorization"] == "lin_api_test"
    payload = json.loads(request.content)
    assert payload["variables"] == {"issueId": "UE-12", "body": "0:45"}
    assert "commentCreate" in payload["query"]
    await client.aclose()


async def test_server_error_is_retried():
    handler, seen = _scripted(httpx.Response(503), httpx.Response(200, json=_OK))
    client = _client(handler)

    assert await client.post_time_entry("UE-1", "0:15") == "c-1"
    assert len(seen) == 2
    await client.aclose()


async def test_transport_errors_exhaust_retries():
    handler, seen = _scripted(*[httpx.ConnectError("refused") for _ in range(3)])
    client = _client(handler, max_retries=2)

    with pytest.raises(TrackerAPIError) as exc_info:
        await client.post_time_entry("UE-1", "0:15")
    assert exc_info.value.api_error_type == "connection_error"
    assert len(seen) == 3
    await client.aclose()


async def test_rate_limit_exhausted():
    handler, seen = _scripted(*[httpx.Response(429) for _ in range(4)])
    client = _client(handler, max_retries=3)

    with pytest.raises(TrackerAPIError) as exc_info:
        await client.post_time_entry("UE-1", "0:15")
    assert exc_info.value.api_error_type == "rate_limit"
    assert len(seen) == 4
    await client.aclose()


async def test_client_error_not_retried():
    handler, seen = _scripted(httpx.Response(401, text="bad key"))
    client = _client(handler)

    with pytest.raises(TrackerAPIError) as exc_info:
        await client.post_time_entry("UE-1", "0:15")
    assert exc_info.value.api_error_type == "client_error"
    assert len(seen) == 1
    await client.aclose()


async def test_graphql_errors_raise():
    body = {"errors": [{"message": "Entity not found: Issue"}]}
    handler, _ = _scripted(httpx.Response(200, json=body))
    client = _client(handler)

    with pytest.raises(TrackerAPIError) as exc_info:
        await client.post_time_entry("UE-404", "0:15")
    assert exc_info.value.api_error_type == "graphql_error"
    assert "Entity not found" in exc_info.value.message
    await client.aclose()


async def test_unsuccessful_mutation_raises():
    body = {"data": {"commentCreate": {"success": False, "comment": None}}}
    handler, _ = _scripted(httpx.Response(200, json=body))
    client = _client(handler)

    with pytest.raises(TrackerAPIError) as exc_info:
        await client.post_time_entry("UE-1", "0:15")
    assert exc_info.value.api_error_type == "rejected"
    await client.aclose()


def test_retry_after_header_in_milliseconds():
    assert ResilientLinearClient._extract_retry_after(
        httpx.Response(429, headers={"Retry-After": "3"}),
    ) == 3000
    assert ResilientLinearClient._extract_retry_after(httpx.Response(429)) is None


def test_backoff_stays_within_jitter_band():
    client = ResilientLinearClient(api_key="k", base_delay_ms=1000, max_delay_ms=3000)
    for attempt, nominal in [(0, 1000), (1, 2000), (5, 3000)]:
        delay = client._backoff(attempt)
        assert nominal * 0.75 <= delay <= nominal * 1.25


def test_configured_reflects_api_key():
    assert ResilientLinearClient(api_key="").configured is False
    assert ResilientLinearClient(api_key="lin_api_x").configured is True
