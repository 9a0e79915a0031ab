"""
Watch history API endpoints.
"""

from fastapi import APIRouter, Depends

from streamflow.dependencies import get_current_user, get_history_service
from streamflow.models.user import User
from streamflow.schemas.activity import HistoryResponse, VideoIdRequest
from streamflow.schemas.auth import APIError, MessageResponse
from streamflow.services.history_service import HistoryService

router = APIRouter(
    prefix="/history",
    tags=["History"],
    responses={
        401: {"model": APIError, "description": "Access token required"},
        403: {"model": APIError, "description": "Invalid token"},
    },
)


@router.post("/add", response_model=MessageResponse)
async def add_to_history(
    payload: VideoIdRequest,
    current_user: User = Depends(get_current_user),
    history_service: HistoryService = Depends(get_history_service),
) -> MessageResponse:
    await history_service.add(current_user.id, payload.video_id)
    return MessageResponse(message="Video added to history")


@router.get("", response_model=HistoryResponse)
async def get_history(
    current_user: User = Depends(get_current_user),
    history_service: HistoryService = Depends(get_history_service),
) -> HistoryResponse:
    """Most recent first, joined with current video metadata."""
    return HistoryResponse(history=await history_service.list(current_user.id))


@router.delete("/clear", response_model=MessageResponse)
async def clear_history(
    current_user: User = Depends(get_current_user),
    history_service: HistoryService = Depends(get_history_service),
) -> MessageResponse:
    await history_service.clear(current_user.id)
    return MessageResponse(message="History cleared successfully")


@router.delete("/remove/{video_id}", response_model=MessageResponse)
async def remove_from_history(
    video_id: str,
    current_user: User = Depends(get_current_user),
    history_service: HistoryService = Depends(get_history_service),
) -> MessageResponse:
    await history_service.remove(current_user.id, video_id)
    return MessageResponse(message="Video removed from history")
