"""
History Service - The capped, most-recent-first watch history.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.database import utcnow
from streamflow.repositories.history_repository import HISTORY_LIMIT, HistoryRepository
from streamflow.schemas.activity import HistoryItem
from streamflow.schemas.catalog import UNKNOWN_VIEW_COUNT
from streamflow.services.base import BaseService
from streamflow.services.catalog_service import CatalogService
from streamflow.services.user_service import require_video_id


class HistoryService(BaseService):
    def __init__(
        self,
        db: AsyncSession,
        catalog: CatalogService,
        limit: int = HISTORY_LIMIT,
    ):
        super().__init__(db)
        self.history_repo = HistoryRepository(db)
        self.catalog = catalog
        self.limit = limit

    async def add(self, user_id: int, video_id: Optional[str]) -> None:
        """Move the video to the front with a fresh timestamp, then trim."""
        video_id = require_video_id(video_id)
        self._log_operation("add_history", user_id=user_id, video_id=video_id)
        await self.history_repo.record(user_id, video_id, utcnow(), limit=self.limit)

    async def list(self, user_id: int) -> List[HistoryItem]:
        """
        History joined with current video metadata, most recent first.

        Entries whose video no longer resolves (deleted, private or
        region-blocked) are left out rather than reported.
        """
        entries = await self.history_repo.list_for_user(user_id)
        if not entries:
            return []

        details = await self.catalog.videos_by_ids([e.video_id for e in entries])

        items = []
        for entry in entries:
            video = details.get(entry.video_id)
            if video is None:
                continue
            items.append(
                HistoryItem(
                    id=video.id,
                    title=video.title,
                    description=video.description,
                    thumbnail=video.thumbnail,
                    channel_title=video.channel_title,
                    published_at=video.published_at,
                    view_count=video.view_count or UNKNOWN_VIEW_COUNT,
                    watched_at=entry.watched_at,
                )
            )

        dropped = len(entries) - len(items)
        if dropped:
            self.logger.info(f"Dropped {dropped} unresolvable history entries for user {user_id}")
        return items

    async def remove(self, user_id: int, video_id: str) -> None:
        self._log_operation("remove_history", user_id=user_id, video_id=video_id)
        await self.history_repo.remove(user_id, video_id)

    async def clear(self, user_id: int) -> None:
        self._log_operation("clear_history", user_id=user_id)
        await self.history_repo.clear(user_id)
