# Import all models to make them available
from .activity import LikedVideo, Playlist, PlaylistVideo, WatchHistoryEntry
from .user import User

__all__ = [
    "User",
    "LikedVideo",
    "Playlist",
    "PlaylistVideo",
    "WatchHistoryEntry",
]
