"""
History Repository - Data access for the capped watch history.

This provides:
1. Move-to-front recording of a watched video
2. Trimming to the most recent entries
3. Most-recent-first listing, single removal and clearing
"""

from datetime import datetime
from typing import List

from sqlalchemy import delete, func, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.models.activity import WatchHistoryEntry
from streamflow.repositories.base import BaseRepository

HISTORY_LIMIT = 100


class HistoryRepository(BaseRepository[WatchHistoryEntry]):
    """
    Watch history repository.

    Ordering is watched_at descending with the row id as tie-breaker, so a
    re-inserted row always sorts ahead of older rows with the same timestamp.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(WatchHistoryEntry, db)

    def _most_recent_first(self, user_id: int):
        return (
            select(WatchHistoryEntry)
            .where(WatchHistoryEntry.user_id == user_id)
            .order_by(WatchHistoryEntry.watched_at.desc(), WatchHistoryEntry.id.desc())
        )

    async def record(
        self,
        user_id: int,
        video_id: str,
        watched_at: datetime,
        limit: int = HISTORY_LIMIT,
    ) -> None:
        """
        Put a video at the front of the history with a fresh timestamp and
        trim the history to `limit` entries, in one transaction.
        """
        try:
            await self.db.execute(
                delete(WatchHistoryEntry).where(
                    WatchHistoryEntry.user_id == user_id,
                    WatchHistoryEntry.video_id == video_id,
                )
            )
            self.db.add(
                WatchHistoryEntry(
                    user_id=user_id, video_id=video_id, watched_at=watched_at
                )
            )
            await self.db.flush()
            await self._trim(user_id, limit)
            await self.db.commit()
        except IntegrityError:
            # A concurrent request inserted the same video; refresh its timestamp
            await self.db.rollback()
            await self.db.execute(
                update(WatchHistoryEntry)
                .where(
                    WatchHistoryEntry.user_id == user_id,
                    WatchHistoryEntry.video_id == video_id,
                )
                .values(watched_at=watched_at)
            )
            await self._trim(user_id, limit)
            await self.db.commit()

    async def _trim(self, user_id: int, limit: int) -> int:
        """Delete everything beyond the `limit` most recent entries."""
        overflow = await self.db.execute(
            self._most_recent_first(user_id)
            .with_only_columns(WatchHistoryEntry.id)
            .offset(limit)
        )
        overflow_ids = list(overflow.scalars().all())
        if not overflow_ids:
            return 0

        result = await self.db.execute(
            delete(WatchHistoryEntry).where(WatchHistoryEntry.id.in_(overflow_ids))
        )
        return result.rowcount

    async def list_for_user(self, user_id: int) -> List[WatchHistoryEntry]:
        """History entries, most recent first."""
        result = await self.db.execute(self._most_recent_first(user_id))
        return list(result.scalars().all())

    async def remove(self, user_id: int, video_id: str) -> bool:
        result = await self.db.execute(
            delete(WatchHistoryEntry).where(
                WatchHistoryEntry.user_id == user_id,
                WatchHistoryEntry.video_id == video_id,
            )
        )
        await self.db.commit()
        return result.rowcount > 0

    async def clear(self, user_id: int) -> int:
        result = await self.db.execute(
            delete(WatchHistoryEntry).where(WatchHistoryEntry.user_id == user_id)
        )
        await self.db.commit()
        return result.rowcount

    async def count_for_user(self, user_id: int) -> int:
        result = await self.db.execute(
            select(func.count(WatchHistoryEntry.id)).where(
                WatchHistoryEntry.user_id == user_id
            )
        )
        return result.scalar() or 0
