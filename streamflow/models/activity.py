"""
Activity models - What a user does with catalog videos.

This handles:
1. Liked videos (a set of external video ids)
2. Playlists and their ordered video ids
3. Watch history (most recent first, capped per user)
"""

from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from streamflow.database import Base, utcnow

if TYPE_CHECKING:
    from streamflow.models.user import User

# External ids (YouTube video ids are 11 chars; leave room for other catalogs)
VIDEO_ID_LENGTH = 64


class LikedVideo(Base):
    """
    A video in a user's liked set.

    The composite unique constraint keeps the set duplicate-free even
    under concurrent toggles.
    """

    __tablename__ = "liked_videos"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    video_id: Mapped[str] = mapped_column(String(VIDEO_ID_LENGTH))

    user: Mapped["User"] = relationship("User", back_populates="liked_videos")

    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="unique_user_liked_video"),
    )

    def __repr__(self) -> str:
        return f"<LikedVideo(user_id={self.user_id}, video_id='{self.video_id}')>"


class Playlist(Base):
    """
    A named, ordered collection of video ids.

    Design decisions:
    - public_id is the opaque id clients see; the integer id stays internal
    - videos are ordered by insertion (PlaylistVideo.id)
    """

    __tablename__ = "playlists"

    public_id: Mapped[str] = mapped_column(String(36), unique=True, index=True)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    name: Mapped[str] = mapped_column(String(255))

    user: Mapped["User"] = relationship("User", back_populates="playlists")
    items: Mapped[List["PlaylistVideo"]] = relationship(
        "PlaylistVideo",
        back_populates="playlist",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="PlaylistVideo.id",
    )

    def __repr__(self) -> str:
        return f"<Playlist(public_id='{self.public_id}', name='{self.name}')>"

    @property
    def video_ids(self) -> List[str]:
        return [item.video_id for item in self.items]


class PlaylistVideo(Base):
    """A video id inside a playlist; unique per playlist."""

    __tablename__ = "playlist_videos"

    playlist_id: Mapped[int] = mapped_column(
        ForeignKey("playlists.id", ondelete="CASCADE"), index=True
    )
    video_id: Mapped[str] = mapped_column(String(VIDEO_ID_LENGTH))

    playlist: Mapped["Playlist"] = relationship("Playlist", back_populates="items")

    __table_args__ = (
        UniqueConstraint("playlist_id", "video_id", name="unique_playlist_video"),
    )


class WatchHistoryEntry(Base):
    """
    One watched video.

    Re-watching refreshes watched_at instead of adding a row, so ordering
    by watched_at gives the most-recent-first history.
    """

    __tablename__ = "watch_history"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), index=True
    )
    video_id: Mapped[str] = mapped_column(String(VIDEO_ID_LENGTH))
    watched_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow
    )

    user: Mapped["User"] = relationship("User", back_populates="watch_history")

    __table_args__ = (
        UniqueConstraint("user_id", "video_id", name="unique_user_history_video"),
        Index("idx_history_user_watched", "user_id", "watched_at"),
    )

    def __repr__(self) -> str:
        return f"<WatchHistoryEntry(user_id={self.user_id}, video_id='{self.video_id}')>"
