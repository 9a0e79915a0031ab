"""
Catalog Service - Normalized access to the YouTube and Jamendo catalogs.

This provides:
1. Track search and lookup (Jamendo)
2. Video search, trending, details, playlists and comments (YouTube)
3. Related videos derived from the seed video's title and channel
4. Batched metadata lookup for many video ids
5. Short-lived Redis caching of search and trending responses
"""

import asyncio
import hashlib
import logging
import re
from typing import Any, Dict, List, Optional, Sequence, Type, TypeVar

from pydantic import BaseModel

from streamflow.config import settings
from streamflow.core.cache import CacheManager
from streamflow.core.exceptions import AppException, ExternalServiceError, NotFoundError
from streamflow.core.jamendo import JamendoClient
from streamflow.core.youtube import MAX_IDS_PER_REQUEST, YouTubeClient
from streamflow.schemas.catalog import (
    UNKNOWN_DURATION,
    UNKNOWN_VIEW_COUNT,
    CommentResponse,
    PlaylistSummary,
    TrackResponse,
    VideoDetails,
    VideoSummary,
)

logger = logging.getLogger(__name__)

SchemaType = TypeVar("SchemaType", bound=BaseModel)

SEARCH_RESULTS = 20
TRENDING_RESULTS = 20
RELATED_CANDIDATES = 15
RELATED_RESULTS = 10
COMMENT_RESULTS = 20
FALLBACK_REGION = "US"

_BRACKETED = re.compile(r"\([^)]*\)|\[[^\]]*\]")
_STOPWORDS = re.compile(
    r"\b(?:official|video|lyrics|audio|mv|hd|4k|remaster(?:ed)?|live|performance)\b",
    re.IGNORECASE,
)
_SEPARATORS = re.compile(r"[-_|]")
_WHITESPACE = re.compile(r"\s+")


def build_query_from_title(title: str) -> str:
    """
    Turn a video title into a search query for similar videos.

    Drops bracketed and parenthesized segments, noise words such as
    "official" or "lyrics", and separators. Falls back to the untouched
    title when nothing is left.

        >>> build_query_from_title("Artist - Song (Official Video) [HD]")
        'Artist Song'
    """
    cleaned = _BRACKETED.sub(" ", title)
    cleaned = _STOPWORDS.sub(" ", cleaned)
    cleaned = _SEPARATORS.sub(" ", cleaned)
    cleaned = _WHITESPACE.sub(" ", cleaned).strip()
    return cleaned or title


def _thumbnail(snippet: Dict[str, Any], *sizes: str) -> Optional[str]:
    thumbnails = snippet.get("thumbnails") or {}
    for size in sizes:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return None


def normalize_track(item: Dict[str, Any]) -> TrackResponse:
    return TrackResponse(
        id=str(item.get("id")),
        name=item.get("name") or "",
        duration=int(item.get("duration") or 0),
        artist=item.get("artist_name"),
        album=item.get("album_name"),
        image=item.get("image"),
        audio=item.get("audio"),
    )


def normalize_search_result(item: Dict[str, Any]) -> Optional[VideoSummary]:
    """search.list result; None for results that are not videos."""
    video_id = (item.get("id") or {}).get("videoId")
    if not video_id:
        return None

    snippet = item.get("snippet") or {}
    return VideoSummary(
        id=video_id,
        title=snippet.get("title") or "",
        channel=snippet.get("channelTitle") or "",
        thumbnail=_thumbnail(snippet, "medium", "default"),
        published_at=snippet.get("publishedAt"),
        view_count=UNKNOWN_VIEW_COUNT,
        duration=UNKNOWN_DURATION,
    )


def normalize_video(item: Dict[str, Any]) -> VideoSummary:
    """videos.list item with statistics and content details."""
    snippet = item.get("snippet") or {}
    statistics = item.get("statistics") or {}
    content = item.get("contentDetails") or {}
    return VideoSummary(
        id=item["id"],
        title=snippet.get("title") or "",
        channel=snippet.get("channelTitle") or "",
        thumbnail=_thumbnail(snippet, "medium", "default"),
        published_at=snippet.get("publishedAt"),
        view_count=statistics.get("viewCount") or UNKNOWN_VIEW_COUNT,
        duration=content.get("duration") or UNKNOWN_DURATION,
    )


def normalize_video_details(item: Dict[str, Any]) -> VideoDetails:
    snippet = item.get("snippet") or {}
    statistics = item.get("statistics") or {}
    content = item.get("contentDetails") or {}
    return VideoDetails(
        id=item["id"],
        title=snippet.get("title") or "",
        description=snippet.get("description") or "",
        channel_title=snippet.get("channelTitle") or "",
        channel_id=snippet.get("channelId"),
        published_at=snippet.get("publishedAt"),
        thumbnail=_thumbnail(snippet, "high", "medium", "default"),
        view_count=statistics.get("viewCount"),
        like_count=statistics.get("likeCount"),
        duration=content.get("duration"),
    )


def normalize_playlist(item: Dict[str, Any]) -> PlaylistSummary:
    snippet = item.get("snippet") or {}
    return PlaylistSummary(
        id=item["id"],
        title=snippet.get("title") or "",
        image=_thumbnail(snippet, "medium", "default"),
        channel=snippet.get("channelTitle") or "",
        description=snippet.get("description") or "",
    )


def normalize_comment(item: Dict[str, Any]) -> CommentResponse:
    comment = ((item.get("snippet") or {}).get("topLevelComment") or {}).get(
        "snippet"
    ) or {}
    return CommentResponse(
        id=item["id"],
        author_display_name=comment.get("authorDisplayName") or "",
        author_profile_image_url=comment.get("authorProfileImageUrl"),
        author_channel_url=comment.get("authorChannelUrl"),
        text_display=comment.get("textDisplay") or "",
        like_count=int(comment.get("likeCount") or 0),
        published_at=comment.get("publishedAt"),
        updated_at=comment.get("updatedAt"),
    )


class CatalogService:
    """
    Catalog operations over the YouTube and Jamendo clients.

    Upstream failures surface as ExternalServiceError (502), except in
    `related`, which degrades to trending videos.
    """

    def __init__(
        self,
        youtube: YouTubeClient,
        jamendo: JamendoClient,
        cache: Optional[CacheManager] = None,
        category_id: Optional[str] = None,
        cache_ttl: Optional[int] = None,
    ):
        self.youtube = youtube
        self.jamendo = jamendo
        self.cache = cache
        self.category_id = category_id or settings.youtube_music_category_id
        self.cache_ttl = cache_ttl or settings.catalog_cache_ttl

    @staticmethod
    def _cache_key(kind: str, value: str) -> str:
        digest = hashlib.sha1(value.strip().lower().encode("utf-8")).hexdigest()
        return f"{kind}:{digest}"

    async def _cached_list(
        self, key: str, schema: Type[SchemaType]
    ) -> Optional[List[SchemaType]]:
        if not self.cache:
            return None
        cached = await self.cache.get(key, namespace="catalog")
        if cached is None:
            return None
        return [schema.model_validate(entry) for entry in cached]

    async def _store_list(self, key: str, items: Sequence[BaseModel]) -> None:
        if self.cache:
            await self.cache.set(
                key,
                [item.model_dump(mode="json") for item in items],
                ttl=self.cache_ttl,
                namespace="catalog",
            )

    # Jamendo

    async def search_tracks(self, query: str) -> List[TrackResponse]:
        key = self._cache_key("tracks", query)
        cached = await self._cached_list(key, TrackResponse)
        if cached is not None:
            return cached

        results = await self.jamendo.search_tracks(query, limit=SEARCH_RESULTS)
        tracks = [normalize_track(item) for item in results]
        await self._store_list(key, tracks)
        return tracks

    async def get_track(self, track_id: str) -> TrackResponse:
        item = await self.jamendo.get_track(track_id)
        if not item:
            raise NotFoundError("Track not found")
        return normalize_track(item)

    # YouTube

    async def search_videos(self, query: str) -> List[VideoSummary]:
        key = self._cache_key("videos", query)
        cached = await self._cached_list(key, VideoSummary)
        if cached is not None:
            return cached

        results = await self.youtube.search(
            query, max_results=SEARCH_RESULTS, category_id=self.category_id
        )
        videos = [v for v in map(normalize_search_result, results) if v is not None]
        await self._store_list(key, videos)
        return videos

    async def trending(
        self, region: str = FALLBACK_REGION, limit: int = TRENDING_RESULTS
    ) -> List[VideoSummary]:
        key = self._cache_key("trending", f"{region}:{limit}")
        cached = await self._cached_list(key, VideoSummary)
        if cached is not None:
            return cached

        results = await self.youtube.popular(
            region=region, max_results=limit, category_id=self.category_id
        )
        videos = [normalize_video(item) for item in results]
        await self._store_list(key, videos)
        return videos

    async def get_playlist(self, playlist_id: str) -> PlaylistSummary:
        item = await self.youtube.playlist(playlist_id)
        if not item:
            raise NotFoundError("Playlist not found")
        return normalize_playlist(item)

    async def video_details(self, video_id: str) -> VideoDetails:
        """
        Raises:
            NotFoundError: If YouTube does not know the video
            ExternalServiceError: If the lookup itself failed
        """
        items = await self.youtube.videos([video_id])
        if not items:
            raise NotFoundError("Video not found")
        return normalize_video_details(items[0])

    async def comments(self, video_id: str) -> List[CommentResponse]:
        results = await self.youtube.comment_threads(
            video_id, max_results=COMMENT_RESULTS, order="relevance"
        )
        return [normalize_comment(item) for item in results]

    async def _derive_related(self, video_id: str) -> List[VideoSummary]:
        seeds = await self.youtube.videos([video_id], part="snippet")
        if not seeds:
            raise NotFoundError("Video not found")

        snippet = seeds[0].get("snippet") or {}
        title = snippet.get("title") or ""
        channel = snippet.get("channelTitle") or ""
        query = f"{build_query_from_title(title)} {channel}".strip()

        results = await self.youtube.search(
            query, max_results=RELATED_CANDIDATES, category_id=self.category_id
        )
        candidates = [v for v in map(normalize_search_result, results) if v is not None]
        return [v for v in candidates if v.id != video_id][:RELATED_RESULTS]

    async def related(self, video_id: str) -> List[VideoSummary]:
        """
        Videos similar to `video_id`, searched by its cleaned title plus
        channel name. Never contains the seed itself and holds at most ten
        items. Any failure falls back to US trending videos.

        Raises:
            ExternalServiceError: If the fallback fails as well
        """
        try:
            return await self._derive_related(video_id)
        except AppException as e:
            logger.warning(f"Related videos for {video_id} failed, using trending: {e.message}")

        try:
            fallback = await self.trending(FALLBACK_REGION, limit=RELATED_RESULTS)
        except AppException as e:
            logger.error(f"Trending fallback for {video_id} failed: {e.message}")
            raise ExternalServiceError("YouTube", "Failed to fetch related videos") from e

        return [v for v in fallback if v.id != video_id][:RELATED_RESULTS]

    async def videos_by_ids(
        self, video_ids: Sequence[str], part: str = "snippet,statistics"
    ) -> Dict[str, VideoDetails]:
        """
        Metadata for many videos, fetched in concurrent batches of at most
        MAX_IDS_PER_REQUEST ids. Unknown ids are absent from the mapping.
        """
        unique_ids = list(dict.fromkeys(video_ids))
        if not unique_ids:
            return {}

        batches = [
            unique_ids[i : i + MAX_IDS_PER_REQUEST]
            for i in range(0, len(unique_ids), MAX_IDS_PER_REQUEST)
        ]
        responses = await asyncio.gather(
            *(self.youtube.videos(batch, part=part) for batch in batches)
        )

        details = {}
        for items in responses:
            for item in items:
                details[item["id"]] = normalize_video_details(item)
        return details
