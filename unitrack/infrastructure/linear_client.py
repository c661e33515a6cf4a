"""Resilient Linear Client — posts rounded time as an issue comment, with retry.

Invariants:
    - Rate limits (429): backoff respecting Retry-After, max `max_retries` retries
    - Transient errors (5xx, connection, timeout): exponential backoff with jitter
    - Client errors (other 4xx) and GraphQL `errors`: immediate failure, no retry
    - All failures mapped to TrackerAPIError (core/errors.py)
    - The comment body is passed as a GraphQL variable, never spliced into the query

Design Decisions:
    - Wrapper over raw httpx client: isolates retry logic from the dispatcher
    - ±25% jitter on backoff
"""

import asyncio
import logging
import random

import httpx

from unitrack.core.errors import ErrorContext, TrackerAPIError

logger = logging.getLogger(__name__)

COMMENT_CREATE_MUTATION = (
    "mutation CommentCreate($issueId: String!, $body: String!) {"
    " commentCreate(input: { issueId: $issueId, body: $body }) {"
    " success comment { id } } }"
)


class ResilientLinearClient:
    """Wraps an httpx.AsyncClient with retry logic and error mapping."""

    def __init__(
        self,
        api_key: str,
        api_url: str = "https://api.linear.app/graphql",
        max_retries: int = 3,
        base_delay_ms: int = 500,
        max_delay_ms: int = 10_000,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.api_key = api_key
        self.api_url = api_url
        self.max_retries = max_retries
        self.base_delay_ms = base_delay_ms
        self.max_delay_ms = max_delay_ms
        self.client = httpx.AsyncClient(
            timeout=timeout_seconds,
            transport=transport,
            headers={"Authorization": api_key, "Content-Type": "application/json"},
        )

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def post_time_entry(self, issue_key: str, value: str) -> str | None:
        """Create a comment with the rounded value. Returns the comment id."""
        context = ErrorContext(issue_key=issue_key, operation="commentCreate")
        payload = {
            "query": COMMENT_CREATE_MUTATION,
            "variables": {"issueId": issue_key, "body": value},
        }
        for attempt in range(self.max_retries + 1):
            try:
                response = await self.client.post(self.api_url, json=payload)
            except httpx.TransportError as e:
                await self._handle_transient_error(e, attempt, context)
                continue

            if response.status_code == 429:
                await self._handle_rate_limit(response, attempt, context)
                continue
            if response.status_code >= 500:
                await self._handle_transient_error(
                    f"HTTP {response.status_code}", attempt, context,
                )
                continue
            return self._parse_response(response, attempt, context)
        return None

    async def aclose(self) -> None:
        await self.client.aclose()

    def _parse_response(
        self, response: httpx.Response, attempt: int, context: ErrorContext,
    ) -> str | None:
        if response.status_code != 200:
            raise TrackerAPIError(
                f"non-200 status {response.status_code}: {response.text[:200]}",
                "client_error", context=context,
            )
        try:
            body = response.json()
        except ValueError:
            raise TrackerAPIError("response is not JSON", "bad_response", context=context)
        if body.get("errors"):
            messages = "; ".join(
                str(err.get("message", err)) for err in body["errors"]
            )
            raise TrackerAPIError(messages, "graphql_error", context=context)

        result = (body.get("data") or {}).get("commentCreate") or {}
        if result.get("success") is False:
            raise TrackerAPIError("commentCreate returned success=false", "rejected", context=context)
        comment_id = (result.get("comment") or {}).get("id")
        logger.info(
            "Linear API success",
            extra={"attempt": attempt + 1, "issue_key": context.issue_key},
        )
        return comment_id

    async def _handle_rate_limit(
        self, response: httpx.Response, attempt: int, context: ErrorContext,
    ) -> None:
        retry_after_ms = self._extract_retry_after(response)
        if attempt >= self.max_retries:
            raise TrackerAPIError(
                "Rate limit exceeded after retries",
                "rate_limit",
                retry_after_ms=retry_after_ms,
                context=context,
            )
        delay = retry_after_ms if retry_after_ms is not None else self._backoff(attempt)
        logger.warning(f"Rate limit hit, retry after {delay}ms (attempt {attempt + 1})")
        await asyncio.sleep(delay / 1000)

    async def _handle_transient_error(
        self, e: object, attempt: int, context: ErrorContext,
    ) -> None:
        if attempt >= self.max_retries:
            raise TrackerAPIError(
                f"Transient failure after {self.max_retries} retries: {e}",
                "connection_error",
                context=context,
            )
        delay = self._backoff(attempt)
        logger.warning(f"Transient error, retry after {delay}ms: {e}")
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        """Exponential backoff with ±25% jitter."""
        delay = min(self.max_delay_ms, (2 ** attempt) * self.base_delay_ms)
        return int(delay * random.uniform(0.75, 1.25))  # nosec B311

    @staticmethod
    def _extract_retry_after(response: httpx.Response) -> int | None:
        """Retry-After header in milliseconds, when it is a whole number of seconds."""
        val = response.headers.get("retry-after", "")
        return int(val) * 1000 if val.isdigit() else None
