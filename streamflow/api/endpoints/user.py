"""
User activity API endpoints - likes, playlists and stats.

All routes require a bearer token and only touch the caller's own data.
"""

from typing import Optional

from fastapi import APIRouter, Depends, status

from streamflow.dependencies import get_current_user, get_user_service
from streamflow.models.user import User
from streamflow.schemas.activity import (
    IsLikedResponse,
    LikedVideosResponse,
    LikeToggleResponse,
    PlaylistCreateRequest,
    PlaylistListResponse,
    PlaylistMutationResponse,
    PlaylistResponse,
    UserStats,
    UserStatsResponse,
    VideoIdRequest,
)
from streamflow.schemas.auth import APIError, MessageResponse
from streamflow.services.user_service import UserService

router = APIRouter(
    prefix="/user",
    tags=["User activity"],
    responses={
        401: {"model": APIError, "description": "Access token required"},
        403: {"model": APIError, "description": "Invalid token"},
    },
)


@router.post("/like-video", response_model=LikeToggleResponse)
async def like_video(
    payload: VideoIdRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> LikeToggleResponse:
    """Like the video, or unlike it when it is already liked."""
    result = await user_service.toggle_like(current_user.id, payload.video_id)
    message = (
        "Video added to liked videos"
        if result.is_liked
        else "Video removed from liked videos"
    )
    return LikeToggleResponse(
        message=message, is_liked=result.is_liked, liked_videos=result.liked_videos
    )


@router.get("/liked-videos", response_model=LikedVideosResponse)
async def liked_videos(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> LikedVideosResponse:
    return LikedVideosResponse(
        liked_videos=await user_service.liked_videos(current_user.id)
    )


@router.get("/is-liked/{video_id}", response_model=IsLikedResponse)
async def is_liked(
    video_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> IsLikedResponse:
    return IsLikedResponse(is_liked=await user_service.is_liked(current_user.id, video_id))


@router.post(
    "/playlists",
    response_model=PlaylistMutationResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_playlist(
    payload: PlaylistCreateRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> PlaylistMutationResponse:
    playlist = await user_service.create_playlist(current_user.id, payload.name)
    return PlaylistMutationResponse(
        message="Playlist created successfully",
        playlist=PlaylistResponse.from_playlist(playlist),
    )


@router.get("/playlists", response_model=PlaylistListResponse)
async def list_playlists(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> PlaylistListResponse:
    playlists = await user_service.list_playlists(current_user.id)
    return PlaylistListResponse(
        playlists=[PlaylistResponse.from_playlist(p) for p in playlists]
    )


@router.post("/playlists/{playlist_id}/add-video", response_model=PlaylistMutationResponse)
async def add_video_to_playlist(
    playlist_id: str,
    payload: VideoIdRequest,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> PlaylistMutationResponse:
    playlist = await user_service.add_to_playlist(
        current_user.id, playlist_id, payload.video_id
    )
    return PlaylistMutationResponse(
        message="Video added to playlist successfully",
        playlist=PlaylistResponse.from_playlist(playlist),
    )


@router.delete(
    "/playlists/{playlist_id}/remove-video", response_model=PlaylistMutationResponse
)
async def remove_video_from_playlist(
    playlist_id: str,
    payload: Optional[VideoIdRequest] = None,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> PlaylistMutationResponse:
    playlist = await user_service.remove_from_playlist(
        current_user.id, playlist_id, payload.video_id if payload else None
    )
    return PlaylistMutationResponse(
        message="Video removed from playlist successfully",
        playlist=PlaylistResponse.from_playlist(playlist),
    )


@router.delete("/playlists/{playlist_id}", response_model=MessageResponse)
async def delete_playlist(
    playlist_id: str,
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> MessageResponse:
    await user_service.delete_playlist(current_user.id, playlist_id)
    return MessageResponse(message="Playlist deleted successfully")


@router.get("/stats", response_model=UserStatsResponse)
async def stats(
    current_user: User = Depends(get_current_user),
    user_service: UserService = Depends(get_user_service),
) -> UserStatsResponse:
    result = await user_service.stats(current_user.id)
    return UserStatsResponse(
        stats=UserStats(
            liked_count=result.liked_count,
            playlist_count=result.playlist_count,
            history_count=result.history_count,
        )
    )
