"""
Google OAuth 2.0 client (authorization code flow).

The caller supplies the `state` value and verifies it on the callback;
this client only builds the consent URL, exchanges the code and reads
the user's profile.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlencode

import httpx

from streamflow.core.exceptions import ExternalServiceError

logger = logging.getLogger(__name__)

AUTHORIZE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
TOKEN_URL = "https://oauth2.googleapis.com/token"
USER_INFO_URL = "https://www.googleapis.com/oauth2/v3/userinfo"


class GoogleOAuthError(ExternalServiceError):
    """Code exchange or profile lookup failed."""

    def __init__(self, message: str):
        super().__init__("Google", message)


@dataclass
class GoogleProfile:
    """The subset of the Google profile used to sign a user in."""

    google_id: str
    email: str
    display_name: str = ""
    avatar_url: str = ""


class GoogleOAuthClient:
    def __init__(
        self,
        client_id: str,
        client_secret: str,
        redirect_uri: str,
        http_client: httpx.AsyncClient,
        timeout: float = 10.0,
    ):
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http_client = http_client
        self.timeout = timeout

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        """Consent screen URL asking for the profile and email scopes."""
        params = {
            "response_type": "code",
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "scope": "openid profile email",
            "state": state,
            "prompt": "select_account",
        }
        return f"{AUTHORIZE_URL}?{urlencode(params)}"

    async def complete_authorization(self, code: str) -> GoogleProfile:
        """
        Exchange an authorization code for the user's profile.

        Raises:
            GoogleOAuthError: If the exchange fails or the profile has no email
        """
        access_token = await self._exchange_code_for_token(code)
        user_info = await self._get_user_info(access_token)

        google_id = user_info.get("sub")
        email = user_info.get("email")
        if not google_id or not email:
            raise GoogleOAuthError("Profile is missing an id or email")

        logger.info(f"Google OAuth completed for account {google_id}")

        return GoogleProfile(
            google_id=str(google_id),
            email=email,
            display_name=user_info.get("name") or "",
            avatar_url=user_info.get("picture") or "",
        )

    async def _exchange_code_for_token(self, code: str) -> str:
        data = {
            "code": code,
            "grant_type": "authorization_code",
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "redirect_uri": self.redirect_uri,
        }
        payload = await self._request("POST", TOKEN_URL, data=data)

        access_token = payload.get("access_token")
        if not access_token:
            raise GoogleOAuthError("No access token in token response")
        return access_token

    async def _get_user_info(self, access_token: str) -> Dict[str, Any]:
        return await self._request(
            "GET",
            USER_INFO_URL,
            headers={"Authorization": f"Bearer {access_token}"},
        )

    async def _request(
        self,
        method: str,
        url: str,
        data: Optional[Dict[str, str]] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self.http_client.request(
                method, url, data=data, headers=headers, timeout=self.timeout
            )
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as e:
            logger.error(
                f"Google OAuth call to {url} failed with status {e.response.status_code}"
            )
            raise GoogleOAuthError(
                f"Request failed with status {e.response.status_code}"
            ) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"Google OAuth call to {url} failed: {e}")
            raise GoogleOAuthError("Request failed") from e
