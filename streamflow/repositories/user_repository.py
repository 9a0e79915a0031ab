"""
User Repository - Specialized data access for User model.

This provides:
1. Lookups used by authentication (email, username, Google id)
2. Verification-token lookup restricted to unexpired tokens
3. Atomic deletion of a user together with all activity rows
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import delete, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.models.activity import (
    LikedVideo,
    Playlist,
    PlaylistVideo,
    WatchHistoryEntry,
)
from streamflow.models.user import User
from streamflow.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """
    User-specific repository extending BaseRepository.
    """

    def __init__(self, db: AsyncSession):
        super().__init__(User, db)

    async def get_by_email(self, email: str) -> Optional[User]:
        """
        Get user by email address.

        Emails are stored lower-cased, so the lookup normalizes too.
        """
        result = await self.db.execute(
            select(User).where(User.email == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def get_by_username(self, username: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.username == username))
        return result.scalar_one_or_none()

    async def get_by_email_or_username(
        self, email: str, username: str
    ) -> Optional[User]:
        """
        Find an account that already holds this email or username.

        When two different accounts match, the one holding the email wins
        so callers can report the email conflict first.
        """
        result = await self.db.execute(
            select(User).where(
                or_(User.email == email.strip().lower(), User.username == username)
            )
        )
        matches = list(result.scalars().all())
        if not matches:
            return None

        for user in matches:
            if user.email == email.strip().lower():
                return user
        return matches[0]

    async def get_by_google_id(self, google_id: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.google_id == google_id))
        return result.scalar_one_or_none()

    async def get_by_verification_token(
        self, token: str, now: datetime
    ) -> Optional[User]:
        """
        Get the user holding this verification token, if it has not expired.

        Args:
            token: Token from the verification link
            now: Current time; tokens expiring at or before it are ignored
        """
        result = await self.db.execute(
            select(User).where(
                User.email_verification_token == token,
                User.email_verification_expires > now,
            )
        )
        return result.scalar_one_or_none()

    async def delete_with_activity(self, user_id: int) -> bool:
        """
        Delete a user and every row that belongs to them in one transaction.

        Returns:
            True if the user existed and was deleted
        """
        playlist_ids = select(Playlist.id).where(Playlist.user_id == user_id)

        try:
            await self.db.execute(
                delete(PlaylistVideo).where(PlaylistVideo.playlist_id.in_(playlist_ids))
            )
            await self.db.execute(delete(Playlist).where(Playlist.user_id == user_id))
            await self.db.execute(delete(LikedVideo).where(LikedVideo.user_id == user_id))
            await self.db.execute(
                delete(WatchHistoryEntry).where(WatchHistoryEntry.user_id == user_id)
            )
            result = await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
        except Exception:
            await self.db.rollback()
            raise

        return result.rowcount > 0
