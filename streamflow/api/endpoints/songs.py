"""
Catalog API endpoints.

Jamendo tracks live at the router root; YouTube endpoints under /youtube.
None of them require authentication.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from streamflow.core.exceptions import ValidationError
from streamflow.dependencies import get_catalog_service
from streamflow.schemas.auth import APIError
from streamflow.schemas.catalog import (
    CommentResponse,
    PlaylistSummary,
    TrackResponse,
    VideoDetails,
    VideoSummary,
)
from streamflow.services.catalog_service import CatalogService

router = APIRouter(
    prefix="/songs",
    tags=["Catalog"],
    responses={
        400: {"model": APIError, "description": "Missing query parameter"},
        502: {"model": APIError, "description": "Catalog unavailable"},
    },
)


def _required(value: Optional[str], name: str) -> str:
    value = (value or "").strip()
    if not value:
        raise ValidationError(f'Query parameter "{name}" is required')
    return value


@router.get("/search", response_model=List[TrackResponse], summary="Search tracks")
async def search_tracks(
    q: Optional[str] = Query(None, description="Free-text query"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[TrackResponse]:
    return await catalog.search_tracks(_required(q, "q"))


@router.get("/stream/{track_id}", response_model=TrackResponse, summary="Track with audio URL")
async def stream_track(
    track_id: str,
    catalog: CatalogService = Depends(get_catalog_service),
) -> TrackResponse:
    return await catalog.get_track(track_id)


@router.get("/youtube/search", response_model=List[VideoSummary])
async def search_videos(
    q: Optional[str] = Query(None, description="Free-text query"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[VideoSummary]:
    return await catalog.search_videos(_required(q, "q"))


@router.get("/youtube/playlist", response_model=PlaylistSummary)
async def youtube_playlist(
    playlist_id: Optional[str] = Query(None, alias="playlistId"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> PlaylistSummary:
    return await catalog.get_playlist(_required(playlist_id, "playlistId"))


@router.get("/youtube/trending", response_model=List[VideoSummary])
async def trending(
    region: str = Query("US", min_length=2, max_length=2, description="ISO 3166-1 code"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[VideoSummary]:
    return await catalog.trending(region.upper())


@router.get("/youtube/related", response_model=List[VideoSummary])
async def related(
    video_id: Optional[str] = Query(None, alias="videoId"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[VideoSummary]:
    """Up to ten related videos, or trending videos when derivation fails."""
    return await catalog.related(_required(video_id, "videoId"))


@router.get("/youtube/video", response_model=VideoDetails)
async def video_details(
    video_id: Optional[str] = Query(None, alias="videoId"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> VideoDetails:
    return await catalog.video_details(_required(video_id, "videoId"))


@router.get("/youtube/comments", response_model=List[CommentResponse])
async def comments(
    video_id: Optional[str] = Query(None, alias="videoId"),
    catalog: CatalogService = Depends(get_catalog_service),
) -> List[CommentResponse]:
    return await catalog.comments(_required(video_id, "videoId"))
