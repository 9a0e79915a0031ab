"""
Jamendo API v3 client (royalty-free tracks with streamable audio URLs).
"""

import logging
from typing import Any, Dict, List, Optional

import httpx

from streamflow.core.youtube import CatalogError

logger = logging.getLogger(__name__)


class JamendoClient:
    """
    Jamendo tracks API client.

    Jamendo reports failures inside a 200 response through
    `headers.status`, so both HTTP and payload errors are checked.
    """

    service_name = "Jamendo"

    def __init__(
        self,
        client_id: str,
        http_client: httpx.AsyncClient,
        base_url: str = "https://api.jamendo.com/v3.0",
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.http_client = http_client
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    async def _get_tracks(self, params: Dict[str, Any]) -> List[Dict[str, Any]]:
        try:
            response = await self.http_client.get(
                f"{self.base_url}/tracks/",
                params={"client_id": self.client_id, "format": "json", **params},
                timeout=self.timeout,
            )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Jamendo request failed with status {e.response.status_code}")
            raise CatalogError(
                self.service_name, f"tracks returned {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Jamendo request error: {e}")
            raise CatalogError(self.service_name, "tracks request failed") from e

        headers = data.get("headers") or {}
        if headers.get("status", "success") != "success":
            logger.error(f"Jamendo error payload: {headers.get('error_message')}")
            raise CatalogError(
                self.service_name, headers.get("error_message") or "request rejected"
            )

        return data.get("results") or []

    async def search_tracks(self, query: str, limit: int = 20) -> List[Dict[str, Any]]:
        return await self._get_tracks({"search": query, "limit": limit})

    async def get_track(self, track_id: str) -> Optional[Dict[str, Any]]:
        results = await self._get_tracks({"id": track_id})
        return results[0] if results else None
