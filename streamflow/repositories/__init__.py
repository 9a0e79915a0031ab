"""
Repository layer - Data access patterns for the application.

This module exports all repositories for easy importing:
- BaseRepository: Generic CRUD operations
- UserRepository: Accounts and atomic account deletion
- LikeRepository, PlaylistRepository, HistoryRepository: user activity
"""

from .base import BaseRepository
from .history_repository import HISTORY_LIMIT, HistoryRepository
from .like_repository import LikeRepository
from .playlist_repository import PlaylistRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "LikeRepository",
    "PlaylistRepository",
    "HistoryRepository",
    "HISTORY_LIMIT",
]
