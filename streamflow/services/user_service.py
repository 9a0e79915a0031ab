"""
User Service - Likes, playlists and activity statistics.

Each operation is scoped to the authenticated user and maps to single
statements guarded by unique constraints, so concurrent requests for the
same user cannot introduce duplicates.
"""

from dataclasses import dataclass
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.core.exceptions import ConflictError, NotFoundError, ValidationError
from streamflow.models.activity import VIDEO_ID_LENGTH, Playlist
from streamflow.repositories.history_repository import HistoryRepository
from streamflow.repositories.like_repository import LikeRepository
from streamflow.repositories.playlist_repository import PlaylistRepository
from streamflow.services.base import BaseService

PLAYLIST_NAME_MAX_LENGTH = 100


@dataclass
class LikeToggle:
    is_liked: bool
    liked_videos: List[str]


@dataclass
class ActivityStats:
    liked_count: int
    playlist_count: int
    history_count: int


def require_video_id(video_id: Optional[str]) -> str:
    video_id = (video_id or "").strip()
    if not video_id:
        raise ValidationError("Video ID is required")
    if len(video_id) > VIDEO_ID_LENGTH:
        raise ValidationError(f"Video ID must be at most {VIDEO_ID_LENGTH} characters")
    return video_id


class UserService(BaseService):
    """
    Service for a user's likes and playlists.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(db)
        self.like_repo = LikeRepository(db)
        self.playlist_repo = PlaylistRepository(db)
        self.history_repo = HistoryRepository(db)

    # Likes

    async def toggle_like(self, user_id: int, video_id: Optional[str]) -> LikeToggle:
        """
        Flip membership of a video in the liked set.

        Returns:
            The new membership state and the full liked set
        """
        video_id = require_video_id(video_id)
        self._log_operation("toggle_like", user_id=user_id, video_id=video_id)

        if await self.like_repo.is_liked(user_id, video_id):
            await self.like_repo.remove(user_id, video_id)
            is_liked = False
        else:
            await self.like_repo.add(user_id, video_id)
            is_liked = True

        return LikeToggle(
            is_liked=is_liked, liked_videos=await self.like_repo.list_ids(user_id)
        )

    async def liked_videos(self, user_id: int) -> List[str]:
        return await self.like_repo.list_ids(user_id)

    async def is_liked(self, user_id: int, video_id: str) -> bool:
        return await self.like_repo.is_liked(user_id, video_id)

    # Playlists

    async def create_playlist(self, user_id: int, name: Optional[str]) -> Playlist:
        """
        Raises:
            ValidationError: If the name is blank or too long
        """
        name = (name or "").strip()
        if not name:
            raise ValidationError("Playlist name is required")
        if len(name) > PLAYLIST_NAME_MAX_LENGTH:
            raise ValidationError(
                f"Playlist name must be at most {PLAYLIST_NAME_MAX_LENGTH} characters"
            )

        self._log_operation("create_playlist", user_id=user_id)
        return await self.playlist_repo.create_for_user(user_id, name)

    async def list_playlists(self, user_id: int) -> List[Playlist]:
        return await self.playlist_repo.list_for_user(user_id)

    async def _get_playlist(self, user_id: int, playlist_id: str) -> Playlist:
        playlist = await self.playlist_repo.get_for_user(user_id, playlist_id)
        if not playlist:
            raise NotFoundError("Playlist not found")
        return playlist

    async def add_to_playlist(
        self, user_id: int, playlist_id: str, video_id: Optional[str]
    ) -> Playlist:
        """
        Append a video to a playlist.

        Raises:
            NotFoundError: If the user has no such playlist
            ConflictError: If the playlist already holds the video
        """
        video_id = require_video_id(video_id)
        playlist = await self._get_playlist(user_id, playlist_id)

        self._log_operation(
            "add_to_playlist", user_id=user_id, playlist_id=playlist_id, video_id=video_id
        )
        if not await self.playlist_repo.add_video(playlist, video_id):
            raise ConflictError("Video already in playlist")

        return await self._get_playlist(user_id, playlist_id)

    async def remove_from_playlist(
        self, user_id: int, playlist_id: str, video_id: Optional[str]
    ) -> Playlist:
        """Remove a video; an id that is not in the playlist is ignored."""
        video_id = require_video_id(video_id)
        playlist = await self._get_playlist(user_id, playlist_id)

        self._log_operation(
            "remove_from_playlist",
            user_id=user_id,
            playlist_id=playlist_id,
            video_id=video_id,
        )
        await self.playlist_repo.remove_video(playlist, video_id)
        return await self._get_playlist(user_id, playlist_id)

    async def delete_playlist(self, user_id: int, playlist_id: str) -> None:
        self._log_operation("delete_playlist", user_id=user_id, playlist_id=playlist_id)
        if not await self.playlist_repo.delete_for_user(user_id, playlist_id):
            raise NotFoundError("Playlist not found")

    async def stats(self, user_id: int) -> ActivityStats:
        return ActivityStats(
            liked_count=await self.like_repo.count_for_user(user_id),
            playlist_count=await self.playlist_repo.count_for_user(user_id),
            history_count=await self.history_repo.count_for_user(user_id),
        )
