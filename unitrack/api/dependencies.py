"""Request-scoped access to the single TimerService held on app.state."""

from fastapi import Request

from unitrack.services.timer_service import TimerService


def get_timer_service(request: Request) -> TimerService:
    return request.app.state.timer_service
