"""
Playlist Repository - Data access for playlists and their videos.

This provides:
1. Playlist creation with an opaque client-visible id
2. Ownership-scoped lookups (a user only ever sees their own playlists)
3. Constraint-backed add/remove of videos
"""

import uuid
from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from streamflow.models.activity import Playlist, PlaylistVideo
from streamflow.repositories.base import BaseRepository


class PlaylistRepository(BaseRepository[Playlist]):
    """
    Playlist-specific repository.

    Playlists are always returned with their items loaded, since async
    sessions cannot lazy-load the collection later.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(Playlist, db)

    def _with_items(self):
        return (
            select(Playlist)
            .options(selectinload(Playlist.items))
            .execution_options(populate_existing=True)
        )

    async def create_for_user(self, user_id: int, name: str) -> Playlist:
        """
        Create an empty playlist.

        Args:
            user_id: Owner
            name: Already-trimmed playlist name

        Returns:
            The new playlist with its (empty) items loaded
        """
        playlist = Playlist(public_id=str(uuid.uuid4()), user_id=user_id, name=name)
        self.db.add(playlist)
        await self.db.commit()
        return await self.get_for_user(user_id, playlist.public_id)

    async def get_for_user(self, user_id: int, public_id: str) -> Optional[Playlist]:
        result = await self.db.execute(
            self._with_items().where(
                Playlist.user_id == user_id, Playlist.public_id == public_id
            )
        )
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> List[Playlist]:
        """All playlists of a user in creation order."""
        result = await self.db.execute(
            self._with_items().where(Playlist.user_id == user_id).order_by(Playlist.id)
        )
        return list(result.scalars().all())

    async def add_video(self, playlist: Playlist, video_id: str) -> bool:
        """
        Append a video to a playlist.

        Returns:
            True if appended, False if the playlist already contained it
            (including a concurrent insert caught by the unique constraint)
        """
        existing = await self.db.execute(
            select(PlaylistVideo.id).where(
                PlaylistVideo.playlist_id == playlist.id,
                PlaylistVideo.video_id == video_id,
            )
        )
        if existing.first() is not None:
            return False

        self.db.add(PlaylistVideo(playlist_id=playlist.id, video_id=video_id))
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            return False
        return True

    async def remove_video(self, playlist: Playlist, video_id: str) -> bool:
        """
        Remove a video from a playlist; removing an absent id is a no-op.

        Returns:
            True if a row was deleted
        """
        result = await self.db.execute(
            delete(PlaylistVideo).where(
                PlaylistVideo.playlist_id == playlist.id,
                PlaylistVideo.video_id == video_id,
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def delete_for_user(self, user_id: int, public_id: str) -> bool:
        """
        Delete a playlist and its videos.

        Returns:
            True if the playlist existed
        """
        playlist_ids = select(Playlist.id).where(
            Playlist.user_id == user_id, Playlist.public_id == public_id
        )
        try:
            await self.db.execute(
                delete(PlaylistVideo).where(PlaylistVideo.playlist_id.in_(playlist_ids))
            )
            result = await self.db.execute(
                delete(Playlist).where(
                    Playlist.user_id == user_id, Playlist.public_id == public_id
                )
            )
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return result.rowcount > 0

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(Playlist.id)).where(Playlist.user_id == user_id)
        )
        return result.scalar() or 0
