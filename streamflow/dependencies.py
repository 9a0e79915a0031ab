"""
FastAPI dependencies for dependency injection.

This provides:
1. Service layer dependency injection
2. External client construction over the shared httpx client
3. The authenticated-user dependency

Tests replace the external collaborators through
`app.dependency_overrides`.
"""

import httpx
from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from streamflow.config import settings
from streamflow.core.cache import cache_manager
from streamflow.core.email import EmailService
from streamflow.core.google_oauth import GoogleOAuthClient
from streamflow.core.jamendo import JamendoClient
from streamflow.core.security import get_token_claims
from streamflow.core.youtube import YouTubeClient
from streamflow.database import get_db
from streamflow.models.user import User
from streamflow.schemas.auth import TokenClaims
from streamflow.services.auth_service import AuthService
from streamflow.services.catalog_service import CatalogService
from streamflow.services.history_service import HistoryService
from streamflow.services.user_service import UserService


# External collaborators
def get_http_client(request: Request) -> httpx.AsyncClient:
    """The application-wide httpx client opened in the lifespan handler."""
    return request.app.state.http_client


def get_email_service() -> EmailService:
    return EmailService()


def get_catalog_service(
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> CatalogService:
    youtube = YouTubeClient(
        settings.youtube_api_key,
        http_client,
        base_url=settings.youtube_api_url,
        timeout=settings.catalog_timeout_seconds,
    )
    jamendo = JamendoClient(
        settings.jamendo_client_id,
        http_client,
        base_url=settings.jamendo_api_url,
        timeout=settings.catalog_timeout_seconds,
    )
    return CatalogService(youtube, jamendo, cache=cache_manager)


def get_google_oauth_client(
    http_client: httpx.AsyncClient = Depends(get_http_client),
) -> GoogleOAuthClient:
    return GoogleOAuthClient(
        settings.google_client_id,
        settings.google_client_secret,
        settings.google_callback_url,
        http_client,
        timeout=settings.catalog_timeout_seconds,
    )


# Service Dependencies
def get_auth_service(
    db: AsyncSession = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
) -> AuthService:
    return AuthService(db, email_service)


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(db)


def get_history_service(
    db: AsyncSession = Depends(get_db),
    catalog: CatalogService = Depends(get_catalog_service),
) -> HistoryService:
    return HistoryService(db, catalog)


# Current user dependency
async def get_current_user(
    claims: TokenClaims = Depends(get_token_claims),
    auth_service: AuthService = Depends(get_auth_service),
) -> User:
    """
    Resolve the bearer token to a user that still exists.

    Raises:
        AuthenticationError: No token, or the user was deleted (401)
        AuthorizationError: Token failed validation (403)
    """
    return await auth_service.get_user_for_claims(claims)
