"""TerminalNotifier tests — OSC 9 escape, disabled mode, broken streams."""

import io

from unitrack.infrastructure.notifier import TerminalNotifier


def test_writes_osc9_sequence():
    stream = io.StringIO()
    TerminalNotifier(stream=stream).notify("Timer for UE-1 completed. Time logged: 0:15")
    assert stream.getvalue() == "\x1b]9;Timer for UE-1 completed. Time logged: 0:15\x1b\\"


def test_disabled_writes_nothing():
    stream = io.StringIO()
    TerminalNotifier(stream=stream, enabled=False).notify("hello")
    assert stream.getvalue() == ""


def test_closed_stream_is_logged_not_raised(caplog):
    stream = io.StringIO()
    stream.close()
    TerminalNotifier(stream=stream).notify("hello")
    assert "Could not show notification" in caplog.text
