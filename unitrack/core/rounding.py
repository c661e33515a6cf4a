"""Billing Rounding — quarter-hour rounding and duration formatting. Pure.

Invariants:
    - ceil_to_quarter(d) is a multiple of 15 and >= whole minutes of d
    - ceil_to_quarter(0) == 0
    - Anything within QUARTER_GRACE above a boundary stays on that boundary
      (15m00.03s -> 15, 15m01s -> 30)
    - Never mutates the session; only called at submission and for previews
"""

from datetime import timedelta

from unitrack.core.domain_types import QUARTER, QUARTER_GRACE

_MS = timedelta(milliseconds=1)


def ceil_to_quarter(elapsed: timedelta) -> int:
    """Round elapsed time up to the next quarter hour, in minutes.

    Integer millisecond arithmetic, so 15m00s lands exactly on 15.
    """
    elapsed_ms = max(elapsed // _MS, 0)
    quarter_ms = QUARTER // _MS
    quarters = (elapsed_ms + quarter_ms - QUARTER_GRACE // _MS) // quarter_ms
    return quarters * (quarter_ms // 60_000)


def format_quarter(minutes: int) -> str:
    """Minutes as H:MM (no leading zero on hours)."""
    return f"{minutes // 60}:{minutes % 60:02d}"


def format_clock(elapsed: timedelta) -> str:
    """HH:MM:SS display of a duration, truncated to whole seconds."""
    total = max(int(elapsed.total_seconds()), 0)
    hours, rest = divmod(total, 3600)
    minutes, seconds = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"
