"""Issue History — keys the user has timed, oldest first."""

from fastapi import APIRouter, Depends

from unitrack.api.dependencies import get_timer_service
from unitrack.schemas.timer import HistoryResponse
from unitrack.services.timer_service import TimerService

router = APIRouter(prefix="/api/v1/history", tags=["history"])


@router.get("", response_model=HistoryResponse)
async def list_history(service: TimerService = Depends(get_timer_service)):
    return HistoryResponse(issues=await service.history())
