"""Timer stream framing — one `status` event per frame."""

from tests.fakes import T0
from unitrack.api.routes.timer_stream import format_sse
from unitrack.core.timer_engine import TimerEngine
from unitrack.schemas.timer import TimerStatusResponse


def test_sse_frame():
    assert format_sse("status", '{"state":"idle"}') == 'event: status\ndata: {"state":"idle"}\n\n'


def test_status_view_fits_on_one_data_line():
    view = TimerStatusResponse.from_status(TimerEngine().status(T0)).model_dump_json()
    frame = format_sse("status", view)
    assert frame.count("\n") == 2
    assert frame.startswith("event: status\ndata: {")
