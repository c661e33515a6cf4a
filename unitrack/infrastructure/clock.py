"""Wall-clock source shared by the store and the service (timezone-aware UTC)."""

from datetime import datetime, timezone


def utc_now() -> datetime:
    return datetime.now(timezone.utc)
