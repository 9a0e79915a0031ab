"""
Catalog schemas - normalized shapes of third-party catalog data.

Every catalog endpoint returns one of these shapes regardless of which
upstream API (YouTube Data API or Jamendo) produced the data.
"""

from typing import Optional

from streamflow.schemas.base import CamelModel

# Search endpoints do not report these; the client expects fixed placeholders
UNKNOWN_VIEW_COUNT = "0"
UNKNOWN_DURATION = "PT0S"


class TrackResponse(CamelModel):
    """A Jamendo track with a directly playable audio URL."""

    id: str
    name: str
    duration: int = 0
    artist: Optional[str] = None
    album: Optional[str] = None
    image: Optional[str] = None
    audio: Optional[str] = None


class VideoSummary(CamelModel):
    """A video as listed by trending, search and related endpoints."""

    id: str
    title: str
    channel: str = ""
    thumbnail: Optional[str] = None
    published_at: Optional[str] = None
    view_count: str = UNKNOWN_VIEW_COUNT
    duration: str = UNKNOWN_DURATION


class VideoDetails(CamelModel):
    """Full metadata of a single video."""

    id: str
    title: str
    description: str = ""
    channel_title: str = ""
    channel_id: Optional[str] = None
    published_at: Optional[str] = None
    thumbnail: Optional[str] = None
    view_count: Optional[str] = None
    like_count: Optional[str] = None
    duration: Optional[str] = None


class PlaylistSummary(CamelModel):
    """A YouTube playlist header."""

    id: str
    title: str
    image: Optional[str] = None
    channel: str = ""
    description: str = ""


class CommentResponse(CamelModel):
    """A top-level comment thread."""

    id: str
    author_display_name: str = ""
    author_profile_image_url: Optional[str] = None
    author_channel_url: Optional[str] = None
    text_display: str = ""
    like_count: int = 0
    published_at: Optional[str] = None
    updated_at: Optional[str] = None
