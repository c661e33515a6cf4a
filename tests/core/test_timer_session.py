"""TimerSession tests — elapsed accounting across pause/resume and limits.

Invariants:
    - elapsed = now - start - accumulated_pause while RUNNING
    - No time accrues while PAUSED
    - elapsed never exceeds the limit of a bounded session
"""

from datetime import timedelta

from tests.fakes import T0
from unitrack.core.domain_types import TimerState
from unitrack.core.timer_session import TimerSession


def test_measure_while_running():
    session = TimerSession(issue_key="UE-1", start_instant=T0)
    assert session.measure(T0 + timedelta(minutes=3)) == timedelta(minutes=3)


def test_pause_freezes_elapsed():
    session = TimerSession(issue_key="UE-1", start_instant=T0)
    session.pause(T0 + timedelta(minutes=5))

    assert session.state == TimerState.PAUSED
    assert session.pause_instant == T0 + timedelta(minutes=5)
    assert session.measure(T0 + timedelta(minutes=50)) == timedelta(minutes=5)


def test_resume_accumulates_pause():
    session = TimerSession(issue_key="UE-1", start_instant=T0)
    session.pause(T0 + timedelta(minutes=5))
    session.resume(T0 + timedelta(minutes=8))

    assert session.state == TimerState.RUNNING
    assert session.pause_instant is None
    assert session.accumulated_pause == timedelta(minutes=3)
    assert session.measure(T0 + timedelta(minutes=10)) == timedelta(minutes=7)


def test_bounded_session_clamps_to_limit():
    session = TimerSession(issue_key="UE-1", start_instant=T0, limit=timedelta(minutes=10))
    session.measure(T0 + timedelta(minutes=12))

    assert session.elapsed == timedelta(minutes=10)
    assert session.limit_reached
    assert session.progress == 1.0


def test_progress_only_for_bounded_sessions():
    unbounded = TimerSession(issue_key="UE-1", start_instant=T0)
    bounded = TimerSession(issue_key="UE-1", start_instant=T0, limit=timedelta(minutes=20))
    bounded.measure(T0 + timedelta(minutes=5))

    assert unbounded.progress is None
    assert not unbounded.bounded
    assert bounded.progress == 0.25


def test_clock_going_backwards_never_yields_negative_elapsed():
    session = TimerSession(issue_key="UE-1", start_instant=T0)
    assert session.measure(T0 - timedelta(seconds=30)) == timedelta(0)
