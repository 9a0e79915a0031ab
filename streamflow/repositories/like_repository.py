"""
Like Repository - Data access for a user's liked-video set.
"""

from typing import List

from sqlalchemy import delete, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.models.activity import LikedVideo
from streamflow.repositories.base import BaseRepository


class LikeRepository(BaseRepository[LikedVideo]):
    """
    Liked videos are a set; each method is a single statement so that
    toggles never read-modify-write the whole collection.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(LikedVideo, db)

    async def is_liked(self, user_id: int, video_id: str) -> bool:
        result = await self.db.execute(
            select(LikedVideo.id).where(
                LikedVideo.user_id == user_id, LikedVideo.video_id == video_id
            )
        )
        return result.first() is not None

    async def add(self, user_id: int, video_id: str) -> bool:
        """
        Add a video to the set.

        Returns:
            True if a row was inserted, False if it was already liked
        """
        self.db.add(LikedVideo(user_id=user_id, video_id=video_id))
        try:
            await self.db.commit()
        except IntegrityError:
            # A concurrent request liked it first; the set already holds it
            await self.db.rollback()
            return False
        return True

    async def remove(self, user_id: int, video_id: str) -> bool:
        """
        Remove a video from the set.

        Returns:
            True if a row was deleted
        """
        result = await self.db.execute(
            delete(LikedVideo).where(
                LikedVideo.user_id == user_id, LikedVideo.video_id == video_id
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def list_ids(self, user_id: int) -> List[str]:
        """Liked video ids in the order they were liked."""
        result = await self.db.execute(
            select(LikedVideo.video_id)
            .where(LikedVideo.user_id == user_id)
            .order_by(LikedVideo.id)
        )
        return list(result.scalars().all())

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(LikedVideo.id)).where(LikedVideo.user_id == user_id)
        )
        return result.scalar() or 0
