"""
Shared test fixtures and configuration.
"""

import os

# Settings are read at import time, so the environment must be in place first
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["ENVIRONMENT"] = "development"
os.environ["FRONTEND_URL"] = "http://frontend.test"
os.environ["EMAIL_ENABLED"] = "false"

from typing import Any, Dict, List, Set
from unittest.mock import AsyncMock

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from streamflow.core.email import EmailService, EmailTemplate
from streamflow.core.google_oauth import GoogleOAuthClient
from streamflow.core.jamendo import JamendoClient
from streamflow.core.security import SecurityManager
from streamflow.core.youtube import YouTubeClient
from streamflow.database import Base, get_db
from streamflow.dependencies import (
    get_catalog_service,
    get_email_service,
    get_google_oauth_client,
)
from streamflow.main import create_app
from streamflow.services.catalog_service import CatalogService


def youtube_video(
    video_id: str,
    title: str = "Some Song",
    channel: str = "Some Channel",
    views: str = "1000",
    duration: str = "PT3M30S",
) -> Dict[str, Any]:
    """A videos.list item as YouTube returns it."""
    return {
        "id": video_id,
        "snippet": {
            "title": title,
            "description": f"Description of {title}",
            "channelTitle": channel,
            "channelId": f"UC{channel.replace(' ', '')}",
            "publishedAt": "2024-01-01T00:00:00Z",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
                "high": {"url": f"https://i.ytimg.com/vi/{video_id}/hqdefault.jpg"},
            },
        },
        "statistics": {"viewCount": views, "likeCount": "10"},
        "contentDetails": {"duration": duration},
    }


def youtube_search_hit(video_id: str, title: str = "Some Song") -> Dict[str, Any]:
    """A search.list item as YouTube returns it."""
    return {
        "id": {"kind": "youtube#video", "videoId": video_id},
        "snippet": {
            "title": title,
            "channelTitle": "Search Channel",
            "publishedAt": "2024-02-01T00:00:00Z",
            "thumbnails": {
                "default": {"url": f"https://i.ytimg.com/vi/{video_id}/default.jpg"},
                "medium": {"url": f"https://i.ytimg.com/vi/{video_id}/mqdefault.jpg"},
            },
        },
    }


class FakeCatalogUpstream:
    """
    In-memory stand-in for the YouTube and Jamendo HTTP APIs, served
    through httpx.MockTransport so the real clients are exercised.

    Resources listed in `failing` answer with HTTP 500. "popular" is the
    chart=mostPopular variant of videos.list.
    """

    def __init__(self):
        self.videos: Dict[str, Dict[str, Any]] = {}
        self.search_hits: List[Dict[str, Any]] = []
        self.popular: List[Dict[str, Any]] = []
        self.tracks: List[Dict[str, Any]] = []
        self.playlists: Dict[str, Dict[str, Any]] = {}
        self.comments: List[Dict[str, Any]] = []
        self.failing: Set[str] = set()
        self.requests: List[httpx.Request] = []

    def add_video(self, video_id: str, **kwargs) -> Dict[str, Any]:
        item = youtube_video(video_id, **kwargs)
        self.videos[video_id] = item
        return item

    def add_search_hit(self, video_id: str, title: str = "Some Song") -> None:
        self.search_hits.append(youtube_search_hit(video_id, title))

    def add_popular(self, video_id: str, **kwargs) -> None:
        self.popular.append(youtube_video(video_id, **kwargs))

    def add_track(self, track_id: int, name: str = "Free Track") -> None:
        self.tracks.append(
            {
                "id": str(track_id),
                "name": name,
                "duration": 215,
                "artist_name": "Indie Artist",
                "album_name": "Indie Album",
                "image": f"https://usercontent.jamendo.com/{track_id}.jpg",
                "audio": f"https://prod-1.storage.jamendo.com/?trackid={track_id}",
            }
        )

    def requests_for(self, resource: str) -> List[httpx.Request]:
        return [r for r in self.requests if self._resource(r) == resource]

    @staticmethod
    def _resource(request: httpx.Request) -> str:
        resource = request.url.path.rstrip("/").rsplit("/", 1)[-1]
        if resource == "videos" and request.url.params.get("chart") == "mostPopular":
            return "popular"
        return resource

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        resource = self._resource(request)
        params = request.url.params

        if resource in self.failing:
            return httpx.Response(500, json={"error": {"message": "backend error"}})

        if resource == "tracks":
            if "id" in params:
                results = [t for t in self.tracks if str(t["id"]) == params["id"]]
            else:
                results = self.tracks[: int(params.get("limit", 20))]
            return httpx.Response(
                200, json={"headers": {"status": "success"}, "results": results}
            )

        if resource == "popular":
            items = self.popular[: int(params["maxResults"])]
        elif resource == "videos":
            items = [self.videos[i] for i in params["id"].split(",") if i in self.videos]
        elif resource == "search":
            items = self.search_hits[: int(params["maxResults"])]
        elif resource == "playlists":
            item = self.playlists.get(params["id"])
            items = [item] if item else []
        elif resource == "commentThreads":
            items = self.comments[: int(params["maxResults"])]
        else:
            return httpx.Response(404, json={"error": "unknown resource"})

        return httpx.Response(200, json={"items": items})


class RecordingEmailService(EmailService):
    """Email service that records messages instead of sending them."""

    def __init__(self, succeed: bool = True):
        super().__init__()
        self.succeed = succeed
        self.sent: List[Dict[str, Any]] = []

    async def send(self, to: str, template: EmailTemplate) -> bool:
        self.sent.append({"to": to, "subject": template.subject, "html": template.html})
        return self.succeed


@pytest.fixture
def mock_db():
    """Mock database session."""
    return AsyncMock()


@pytest.fixture
def mock_redis():
    """Mock Redis client."""
    redis_mock = AsyncMock()
    redis_mock.ping = AsyncMock(return_value=True)
    redis_mock.get = AsyncMock(return_value=None)
    redis_mock.set = AsyncMock(return_value=True)
    return redis_mock


@pytest.fixture
def security():
    return SecurityManager(secret_key="test-secret", algorithm="HS256", bcrypt_rounds=4)


@pytest_asyncio.fixture
async def db_session():
    """Test database session on an in-memory SQLite database."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    SessionLocal = async_sessionmaker(engine, expire_on_commit=False)

    async with SessionLocal() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def upstream():
    return FakeCatalogUpstream()


@pytest_asyncio.fixture
async def upstream_http(upstream):
    async with httpx.AsyncClient(transport=httpx.MockTransport(upstream.handler)) as client:
        yield client


@pytest.fixture
def catalog_service(upstream_http):
    return CatalogService(
        YouTubeClient("yt-key", upstream_http),
        JamendoClient("jamendo-id", upstream_http),
        category_id="10",
        cache_ttl=60,
    )


@pytest.fixture
def email_service():
    return RecordingEmailService()


@pytest.fixture
def google_profile() -> Dict[str, Any]:
    """Mutable userinfo payload served by the fake Google endpoints."""
    return {
        "sub": "google-123",
        "email": "gina@example.com",
        "name": "Gina Google",
        "picture": "https://lh3.googleusercontent.com/gina.png",
    }


@pytest_asyncio.fixture
async def oauth_client(google_profile):
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host == "oauth2.googleapis.com":
            if b"code=bad-code" in request.content:
                return httpx.Response(400, json={"error": "invalid_grant"})
            return httpx.Response(200, json={"access_token": "google-access-token"})
        return httpx.Response(200, json=google_profile)

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        yield GoogleOAuthClient(
            "client-id", "client-secret", "http://test/api/auth/google/callback", http_client
        )


@pytest.fixture
def app(db_session, catalog_service, email_service, oauth_client):
    """Application with the database and external collaborators replaced."""
    application = create_app()

    async def override_get_db():
        yield db_session

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_catalog_service] = lambda: catalog_service
    application.dependency_overrides[get_email_service] = lambda: email_service
    application.dependency_overrides[get_google_oauth_client] = lambda: oauth_client
    return application


@pytest_asyncio.fixture
async def client(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as c:
        yield c


@pytest_asyncio.fixture
async def auth_headers(client) -> Dict[str, str]:
    """Sign up a user through the API and return its bearer header."""
    response = await client.post(
        "/api/auth/signup",
        json={"username": "melody", "email": "melody@example.com", "password": "secret123"},
    )
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}
