"""
User model - The aggregate root for accounts and their activity.

This model handles:
1. Credentials (password hash and/or linked Google identity)
2. Profile information and email verification state
3. Relationships to liked videos, playlists and watch history
"""

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from streamflow.database import Base

if TYPE_CHECKING:
    from streamflow.models.activity import LikedVideo, Playlist, WatchHistoryEntry


class User(Base):
    """
    User model representing system users.

    Design decisions:
    - Email stored lower-cased; email and username are both unique
    - A password hash is optional when a Google identity is linked
    - Verification token and its expiry are set and cleared together
    - Activity lives in child tables so every mutation is a single-row statement
    """

    __tablename__ = "users"

    # Identity
    username: Mapped[str] = mapped_column(String(30), unique=True, index=True)
    email: Mapped[str] = mapped_column(String(255), unique=True, index=True)
    hashed_password: Mapped[Optional[str]] = mapped_column(String(255))
    google_id: Mapped[Optional[str]] = mapped_column(
        String(255), unique=True, index=True
    )

    # Profile
    avatar_url: Mapped[str] = mapped_column(String(500), default="")
    is_email_verified: Mapped[bool] = mapped_column(Boolean, default=False)
    email_verification_token: Mapped[Optional[str]] = mapped_column(
        String(255), index=True
    )
    email_verification_expires: Mapped[Optional[datetime]] = mapped_column(
        DateTime(timezone=True)
    )

    # Relationships (defined as strings to avoid circular imports)
    liked_videos: Mapped[List["LikedVideo"]] = relationship(
        "LikedVideo",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    playlists: Mapped[List["Playlist"]] = relationship(
        "Playlist",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    watch_history: Mapped[List["WatchHistoryEntry"]] = relationship(
        "WatchHistoryEntry",
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        CheckConstraint(
            "hashed_password IS NOT NULL OR google_id IS NOT NULL",
            name="ck_users_has_credential",
        ),
        CheckConstraint(
            "(email_verification_token IS NULL) = (email_verification_expires IS NULL)",
            name="ck_users_verification_pair",
        ),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, username='{self.username}')>"

    @property
    def has_password(self) -> bool:
        return self.hashed_password is not None

    @property
    def requires_password_confirmation(self) -> bool:
        """Password accounts without a linked Google identity must re-enter it."""
        return self.has_password and not self.google_id
