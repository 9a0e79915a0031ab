"""
YouTube Data API v3 client.

Thin async wrapper returning the raw `items` of each endpoint. Normalizing
items into the API's response shapes is the catalog service's job.
"""

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from streamflow.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

# videos.list accepts at most this many ids per call
MAX_IDS_PER_REQUEST = 50


class CatalogError(ExternalServiceError):
    """A catalog API call failed (transport error or non-2xx status)."""


class YouTubeClient:
    """
    YouTube Data API client.

    Args:
        api_key: API key sent with every request
        http_client: Shared httpx client (owned by the application)
        base_url: API root, overridable for tests
        timeout: Per-request timeout in seconds
    """

    service_name = "YouTube"

    def __init__(
        self,
        api_key: str,
        http_client: httpx.AsyncClient,
        base_url: str = "https://www.googleapis.com/youtube/v3",
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _get(self, resource: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.base_url}/{resource}"
        try:
            response = await self.http_client.get(
                url, params={**params, "key": self.api_key}, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"YouTube {resource} request failed with status {e.response.status_code}"
            )
            raise CatalogError(
                self.service_name, f"{resource} returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"YouTube {resource} request error: {e}")
            raise CatalogError(self.service_name, f"{resource} request failed") from e

    async def search(
        self,
        query: str,
        max_results: int = 20,
        category_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """search.list restricted to videos."""
        params = {
            "part": "snippet",
            "q": query,
            "type": "video",
            "maxResults": max_results,
        }
        if category_id:
            params["videoCategoryId"] = category_id

        data = await self._get("search", params)
        return data.get("items") or []

    async def popular(
        self,
        region: str = "US",
        max_results: int = 20,
        category_id: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """videos.list with chart=mostPopular for a region."""
        params = {
            "part": "snippet,statistics,contentDetails",
            "chart": "mostPopular",
            "maxResults": max_results,
            "regionCode": region,
        }
        if category_id:
            params["videoCategoryId"] = category_id

        data = await self._get("videos", params)
        return data.get("items") or []

    async def videos(
        self,
        video_ids: Sequence[str],
        part: str = "snippet,statistics,contentDetails",
    ) -> List[Dict[str, Any]]:
        """
        videos.list by id. Callers must keep `video_ids` within
        MAX_IDS_PER_REQUEST; unknown ids are simply absent from the result.
        """
        if not video_ids:
            return []
        if len(video_ids) > MAX_IDS_PER_REQUEST:
            raise ValueError(
                f"At most {MAX_IDS_PER_REQUEST} video ids per request, got {len(video_ids)}"
            )

        data = await self._get("videos", {"part": part, "id": ",".join(video_ids)})
        return data.get("items") or []

    async def playlist(self, playlist_id: str) -> Optional[Dict[str, Any]]:
        data = await self._get("playlists", {"part": "snippet", "id": playlist_id})
        items = data.get("items") or []
        return items[0] if items else None

    async def comment_threads(
        self, video_id: str, max_results: int = 20, order: str = "relevance"
    ) -> List[Dict[str, Any]]:
        data = await self._get(
            "commentThreads",
            {
                "part": "snippet",
                "videoId": video_id,
                "order": order,
                "maxResults": max_results,
            },
        )
        return data.get("items") or []
