"""Rounding tests — quarter-hour ceiling and H:MM / HH:MM:SS formatting.

Invariants:
    - ceil_to_quarter(d) is a multiple of 15, >= whole minutes of d, and 0 for 0
    - Exactly on a boundary stays on it; one second past moves up
    - Output is H:MM without a leading zero on hours
"""

from datetime import timedelta

import pytest

from unitrack.core.rounding import (
    ceil_to_quarter, format_clock, format_quarter,
)


@pytest.mark.parametrize(
    ("elapsed", "minutes"),
    [
        (timedelta(0), 0),
        (timedelta(minutes=10), 15),
        (timedelta(minutes=14, seconds=59), 15),
        (timedelta(minutes=15), 15),
        (timedelta(minutes=15, seconds=1), 30),
        (timedelta(minutes=44), 45),
        (timedelta(hours=2, minutes=1), 135),
    ],
)
def test_ceil_to_quarter_grid(elapsed, minutes):
    assert ceil_to_quarter(elapsed) == minutes


def test_boundary_grace_keeps_value_on_boundary():
    """A few milliseconds over a quarter (timer jitter) do not bill a new quarter."""
    assert ceil_to_quarter(timedelta(minutes=15, milliseconds=30)) == 15
    assert ceil_to_quarter(timedelta(minutes=30, milliseconds=59)) == 30


def test_negative_elapsed_rounds_to_zero():
    assert ceil_to_quarter(timedelta(seconds=-5)) == 0


@pytest.mark.parametrize("seconds", [1, 59, 61, 899, 901, 3599, 3601, 7322])
def test_result_is_multiple_of_fifteen_and_not_below_elapsed(seconds):
    elapsed = timedelta(seconds=seconds)
    minutes = ceil_to_quarter(elapsed)
    assert minutes % 15 == 0
    assert minutes >= seconds // 60


@pytest.mark.parametrize(
    ("minutes", "text"),
    [(0, "0:00"), (15, "0:15"), (45, "0:45"), (60, "1:00"), (135, "2:15"), (600, "10:00")],
)
def test_format_quarter(minutes, text):
    assert format_quarter(minutes) == text


def test_format_clock_truncates_to_seconds():
    assert format_clock(timedelta(0)) == "00:00:00"
    assert format_clock(timedelta(hours=1, minutes=2, seconds=3, milliseconds=900)) == "01:02:03"
    assert format_clock(timedelta(hours=27)) == "27:00:00"
