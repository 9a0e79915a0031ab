"""
Integration tests for user activity against a real (SQLite) database.

These tests verify:
1. Likes and playlists never hold duplicates
2. Watch history move-to-front and capping
3. Account deletion removes every activity row
4. Verification tokens stop working once expired
"""

from datetime import timedelta

import pytest
import pytest_asyncio
from sqlalchemy import func, select

from streamflow.core.exceptions import ConflictError, NotFoundError
from streamflow.database import utcnow
from streamflow.models.activity import (
    LikedVideo,
    Playlist,
    PlaylistVideo,
    WatchHistoryEntry,
)
from streamflow.repositories.history_repository import HistoryRepository
from streamflow.repositories.like_repository import LikeRepository
from streamflow.repositories.user_repository import UserRepository
from streamflow.services.user_service import UserService


async def _count(db, model) -> int:
    result = await db.execute(select(func.count(model.id)))
    return result.scalar()


@pytest_asyncio.fixture
async def user(db_session):
    return await UserRepository(db_session).create(
        {
            "username": "melody",
            "email": "melody@example.com",
            "hashed_password": "hash",
        }
    )


@pytest.mark.integration
class TestLikes:
    @pytest.mark.asyncio
    async def test_toggle_twice_restores_state(self, db_session, user):
        service = UserService(db_session)

        first = await service.toggle_like(user.id, "abc00000001")
        second = await service.toggle_like(user.id, "abc00000001")

        assert first.is_liked is True
        assert first.liked_videos == ["abc00000001"]
        assert second.is_liked is False
        assert second.liked_videos == []

    @pytest.mark.asyncio
    async def test_duplicate_like_is_absorbed(self, db_session, user):
        repo = LikeRepository(db_session)
        # The failed insert rolls back and expires loaded instances
        user_id = user.id

        assert await repo.add(user_id, "abc00000001") is True
        assert await repo.add(user_id, "abc00000001") is False
        assert await repo.list_ids(user_id) == ["abc00000001"]

    @pytest.mark.asyncio
    async def test_likes_keep_insertion_order(self, db_session, user):
        service = UserService(db_session)
        for video_id in ("c", "a", "b"):
            await service.toggle_like(user.id, video_id)

        assert await service.liked_videos(user.id) == ["c", "a", "b"]
        assert await service.is_liked(user.id, "a") is True
        assert await service.is_liked(user.id, "z") is False


@pytest.mark.integration
class TestPlaylists:
    @pytest.mark.asyncio
    async def test_duplicate_video_is_rejected(self, db_session, user):
        service = UserService(db_session)
        playlist = await service.create_playlist(user.id, "  Road Trip  ")

        await service.add_to_playlist(user.id, playlist.public_id, "abc00000001")
        with pytest.raises(ConflictError, match="Video already in playlist"):
            await service.add_to_playlist(user.id, playlist.public_id, "abc00000001")

        reloaded = await service._get_playlist(user.id, playlist.public_id)
        assert reloaded.name == "Road Trip"
        assert reloaded.video_ids == ["abc00000001"]

    @pytest.mark.asyncio
    async def test_remove_missing_video_is_noop(self, db_session, user):
        service = UserService(db_session)
        playlist = await service.create_playlist(user.id, "Mix")
        await service.add_to_playlist(user.id, playlist.public_id, "a")
        await service.add_to_playlist(user.id, playlist.public_id, "b")

        after = await service.remove_from_playlist(user.id, playlist.public_id, "zzz")
        assert after.video_ids == ["a", "b"]

        after = await service.remove_from_playlist(user.id, playlist.public_id, "a")
        assert after.video_ids == ["b"]

    @pytest.mark.asyncio
    async def test_playlists_are_scoped_to_owner(self, db_session, user):
        other = await UserRepository(db_session).create(
            {"username": "other", "email": "other@example.com", "hashed_password": "h"}
        )
        service = UserService(db_session)
        playlist = await service.create_playlist(user.id, "Mine")

        with pytest.raises(NotFoundError):
            await service.add_to_playlist(other.id, playlist.public_id, "a")
        with pytest.raises(NotFoundError):
            await service.delete_playlist(other.id, playlist.public_id)

        await service.delete_playlist(user.id, playlist.public_id)
        assert await service.list_playlists(user.id) == []


@pytest.mark.integration
class TestWatchHistory:
    @pytest.mark.asyncio
    async def test_rewatch_moves_to_front(self, db_session, user):
        repo = HistoryRepository(db_session)
        start = utcnow()

        await repo.record(user.id, "a", start)
        await repo.record(user.id, "b", start + timedelta(seconds=1))
        await repo.record(user.id, "a", start + timedelta(seconds=2))

        entries = await repo.list_for_user(user.id)
        assert [e.video_id for e in entries] == ["a", "b"]
        # SQLite hands back naive datetimes
        rewatched_at = entries[0].watched_at.replace(tzinfo=None)
        assert rewatched_at == (start + timedelta(seconds=2)).replace(tzinfo=None)

    @pytest.mark.asyncio
    async def test_history_is_capped(self, db_session, user):
        repo = HistoryRepository(db_session)
        start = utcnow()

        for i in range(101):
            await repo.record(user.id, f"v{i}", start + timedelta(seconds=i))

        entries = await repo.list_for_user(user.id)
        assert len(entries) == 100
        assert entries[0].video_id == "v100"
        assert "v0" not in {e.video_id for e in entries}

    @pytest.mark.asyncio
    async def test_remove_and_clear(self, db_session, user):
        repo = HistoryRepository(db_session)
        for video_id in ("a", "b", "c"):
            await repo.record(user.id, video_id, utcnow())

        assert await repo.remove(user.id, "b") is True
        assert await repo.remove(user.id, "b") is False
        assert await repo.clear(user.id) == 2
        assert await repo.count_for_user(user.id) == 0


@pytest.mark.integration
class TestAccountLifecycle:
    @pytest.mark.asyncio
    async def test_delete_with_activity(self, db_session, user):
        service = UserService(db_session)
        await service.toggle_like(user.id, "a")
        playlist = await service.create_playlist(user.id, "Mix")
        await service.add_to_playlist(user.id, playlist.public_id, "a")
        await HistoryRepository(db_session).record(user.id, "a", utcnow())

        assert await UserRepository(db_session).delete_with_activity(user.id) is True

        for model in (LikedVideo, Playlist, PlaylistVideo, WatchHistoryEntry):
            assert await _count(db_session, model) == 0
        assert await UserRepository(db_session).get(user.id) is None

    @pytest.mark.asyncio
    async def test_expired_verification_token(self, db_session):
        repo = UserRepository(db_session)
        now = utcnow()
        await repo.create(
            {
                "username": "fresh",
                "email": "fresh@example.com",
                "hashed_password": "h",
                "email_verification_token": "fresh-token",
                "email_verification_expires": now + timedelta(hours=1),
            }
        )
        await repo.create(
            {
                "username": "stale",
                "email": "stale@example.com",
                "hashed_password": "h",
                "email_verification_token": "stale-token",
                "email_verification_expires": now - timedelta(hours=1),
            }
        )

        assert (await repo.get_by_verification_token("fresh-token", now)).username == "fresh"
        assert await repo.get_by_verification_token("stale-token", now) is None
