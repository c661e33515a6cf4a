"""Timer Routes — lifecycle operations on the single timer.

Invariants:
    - Every handler goes through TimerService (one lock, one engine)
    - Issue keys are normalized with the configured prefix before they reach
      the engine; an empty key reaches it unchanged and is rejected there
    - Every response carries the post-transition status view

Design Decisions:
    - Pause/Resume on the wrong state return 200 with the unchanged view;
      only pending decisions and busy starts are conflicts (409)
"""

from fastapi import APIRouter, Depends

from unitrack.api.dependencies import get_timer_service
from unitrack.config import get_settings
from unitrack.core.domain_types import IssueKey
from unitrack.core.issue_keys import normalize_issue_key
from unitrack.schemas.timer import (
    CancelConfirmationRequest,
    CompletedEntryResponse,
    LimitRequest,
    LimitSetupRequest,
    RecoveryDecisionRequest,
    StartTimerRequest,
    SubmitResponse,
    TimerStatusResponse,
)
from unitrack.services.timer_service import TimerService

router = APIRouter(prefix="/api/v1/timer", tags=["timer"])


def _issue_key(raw: str) -> IssueKey:
    return normalize_issue_key(raw, get_settings().prefix)


@router.get("", response_model=TimerStatusResponse)
async def get_timer(service: TimerService = Depends(get_timer_service)):
    return TimerStatusResponse.from_status(await service.status())


@router.post("/start", response_model=TimerStatusResponse)
async def start_timer(
    body: StartTimerRequest, service: TimerService = Depends(get_timer_service),
):
    """Start timing an issue, or surface a recovery decision."""
    status = await service.start(_issue_key(body.issue_key))
    return TimerStatusResponse.from_status(status)


@router.post("/limit-setup", response_model=TimerStatusResponse)
async def begin_limit_setup(
    body: LimitSetupRequest, service: TimerService = Depends(get_timer_service),
):
    status = await service.begin_limit_setup(_issue_key(body.issue_key))
    return TimerStatusResponse.from_status(status)


@router.post("/limit", response_model=TimerStatusResponse)
async def apply_limit(
    body: LimitRequest, service: TimerService = Depends(get_timer_service),
):
    """Close limited setup with a minute count and start the bounded session."""
    return TimerStatusResponse.from_status(await service.apply_limit(body.minutes))


@router.delete("/limit-setup", response_model=TimerStatusResponse)
async def abort_limit_setup(service: TimerService = Depends(get_timer_service)):
    return TimerStatusResponse.from_status(await service.abort_limit_setup())


@router.post("/recovery", response_model=TimerStatusResponse)
async def resolve_recovery(
    body: RecoveryDecisionRequest, service: TimerService = Depends(get_timer_service),
):
    return TimerStatusResponse.from_status(await service.resolve_recovery(body.resume))


@router.post("/pause", response_model=TimerStatusResponse)
async def pause_timer(service: TimerService = Depends(get_timer_service)):
    return TimerStatusResponse.from_status(await service.pause())


@router.post("/resume", response_model=TimerStatusResponse)
async def resume_timer(service: TimerService = Depends(get_timer_service)):
    return TimerStatusResponse.from_status(await service.resume())


@router.post("/submit", response_model=SubmitResponse)
async def submit_timer(service: TimerService = Depends(get_timer_service)):
    """Stop the timer and hand the rounded entry to the completion sink."""
    entry, status = await service.submit()
    return SubmitResponse(
        entry=CompletedEntryResponse.from_entry(entry) if entry else None,
        timer=TimerStatusResponse.from_status(status),
    )


@router.post("/cancel", response_model=TimerStatusResponse)
async def request_cancel(service: TimerService = Depends(get_timer_service)):
    return TimerStatusResponse.from_status(await service.request_cancel())


@router.post("/cancel/confirm", response_model=TimerStatusResponse)
async def confirm_cancel(
    body: CancelConfirmationRequest, service: TimerService = Depends(get_timer_service),
):
    return TimerStatusResponse.from_status(await service.confirm_cancel(body.confirm))
