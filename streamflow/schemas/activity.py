"""
User activity schemas - likes, playlists, history and stats.
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from pydantic import Field

from streamflow.schemas.base import CamelModel

if TYPE_CHECKING:
    from streamflow.models.activity import Playlist


class VideoIdRequest(CamelModel):
    """Body of like, add-to-playlist, remove-from-playlist and history calls."""

    video_id: Optional[str] = Field(None, description="External video id")


class PlaylistCreateRequest(CamelModel):
    name: Optional[str] = Field(None, description="Playlist name")


class LikeToggleResponse(CamelModel):
    message: str
    is_liked: bool
    liked_videos: List[str]


class LikedVideosResponse(CamelModel):
    liked_videos: List[str]


class IsLikedResponse(CamelModel):
    is_liked: bool


class PlaylistResponse(CamelModel):
    id: str
    name: str
    videos: List[str] = []
    created_at: Optional[datetime] = None

    @classmethod
    def from_playlist(cls, playlist: "Playlist") -> "PlaylistResponse":
        return cls(
            id=playlist.public_id,
            name=playlist.name,
            videos=playlist.video_ids,
            created_at=playlist.created_at,
        )


class PlaylistMutationResponse(CamelModel):
    message: str
    playlist: PlaylistResponse


class PlaylistListResponse(CamelModel):
    playlists: List[PlaylistResponse]


class UserStats(CamelModel):
    liked_count: int
    playlist_count: int
    history_count: int


class UserStatsResponse(CamelModel):
    stats: UserStats


class HistoryItem(CamelModel):
    """A history entry joined with the video's current metadata."""

    id: str
    title: str
    description: str = ""
    thumbnail: Optional[str] = None
    channel_title: str = ""
    published_at: Optional[str] = None
    view_count: str = "0"
    watched_at: datetime


class HistoryResponse(CamelModel):
    history: List[HistoryItem]
