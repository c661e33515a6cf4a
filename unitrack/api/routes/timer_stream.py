"""Timer Stream — SSE feed of the status view, one `status` event per tick.

Invariants:
    - Read-only: the stream never mutates the engine (ticks come from the
      service's own loop, not from connected clients)
    - The generator stops as soon as the client disconnects
"""

import asyncio
import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from unitrack.api.dependencies import get_timer_service
from unitrack.config import get_settings
from unitrack.schemas.timer import TimerStatusResponse
from unitrack.services.timer_service import TimerService

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/timer", tags=["timer"])

# Keep proxies and browsers from batching small chunks.
_SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "X-Accel-Buffering": "no",
    "Connection": "keep-alive",
}


def format_sse(event: str, data: str) -> str:
    return f"event: {event}\ndata: {data}\n\n"


@router.get("/stream")
async def stream_timer(
    request: Request, service: TimerService = Depends(get_timer_service),
):
    interval = get_settings().tick_interval_seconds

    async def event_generator():
        while not await request.is_disconnected():
            view = TimerStatusResponse.from_status(await service.status())
            yield format_sse("status", view.model_dump_json())
            await asyncio.sleep(interval)
        logger.debug("Timer stream client disconnected")

    return StreamingResponse(
        event_generator(), media_type="text/event-stream", headers=_SSE_HEADERS,
    )
