"""
Unit tests for Catalog Service.
"""

import json
from unittest.mock import AsyncMock

import pytest

from streamflow.core.cache import CacheManager
from streamflow.core.exceptions import ExternalServiceError, NotFoundError
from streamflow.services.catalog_service import build_query_from_title


@pytest.mark.unit
class TestBuildQueryFromTitle:
    def test_strips_brackets_and_noise_words(self):
        assert build_query_from_title("Artist - Song (Official Video) [HD]") == "Artist Song"

    def test_stopwords_are_case_insensitive(self):
        assert build_query_from_title("Band | Track LYRICS Remastered 4K") == "Band Track"

    def test_stopwords_only_match_whole_words(self):
        assert build_query_from_title("Olivia - Deja Vu (Audio)") == "Olivia Deja Vu"
        assert build_query_from_title("Hdmi Dreams_Livewire") == "Hdmi Dreams Livewire"

    def test_collapses_whitespace(self):
        assert build_query_from_title("  A   -   B  ") == "A B"

    def test_falls_back_to_original_title(self):
        for title in ("(Official Video) [HD]", "Official Lyrics Video", "- _ |"):
            assert build_query_from_title(title) == title


@pytest.mark.unit
class TestRelatedVideos:
    @pytest.mark.asyncio
    async def test_searches_by_cleaned_title_and_channel(self, catalog_service, upstream):
        upstream.add_video("seed0000001", title="Artist - Song (Official Video)", channel="ArtistVEVO")
        for i in range(15):
            upstream.add_search_hit(f"rel{i:08d}")

        related = await catalog_service.related("seed0000001")

        search = upstream.requests_for("search")[0].url.params
        assert search["q"] == "Artist Song ArtistVEVO"
        assert search["maxResults"] == "15"
        assert search["videoCategoryId"] == "10"
        assert len(related) == 10
        assert all(v.view_count == "0" and v.duration == "PT0S" for v in related)

    @pytest.mark.asyncio
    async def test_never_returns_the_seed(self, catalog_service, upstream):
        upstream.add_video("seed0000001", title="Song")
        upstream.add_search_hit("seed0000001")
        for i in range(12):
            upstream.add_search_hit(f"rel{i:08d}")

        related = await catalog_service.related("seed0000001")

        ids = [v.id for v in related]
        assert "seed0000001" not in ids
        assert len(ids) == 10

    @pytest.mark.asyncio
    async def test_unknown_seed_falls_back_to_trending(self, catalog_service, upstream):
        for i in range(12):
            upstream.add_popular(f"pop{i:08d}")

        related = await catalog_service.related("missing0001")

        assert [v.id for v in related] == [f"pop{i:08d}" for i in range(10)]
        popular = upstream.requests_for("popular")[0].url.params
        assert popular["regionCode"] == "US"
        assert popular["maxResults"] == "10"
        assert upstream.requests_for("search") == []

    @pytest.mark.asyncio
    async def test_search_failure_falls_back_to_trending(self, catalog_service, upstream):
        upstream.add_video("seed0000001")
        upstream.add_popular("pop00000001")
        upstream.failing.add("search")

        related = await catalog_service.related("seed0000001")

        assert [v.id for v in related] == ["pop00000001"]

    @pytest.mark.asyncio
    async def test_fallback_failure_is_reported(self, catalog_service, upstream):
        upstream.failing.update({"videos", "popular"})

        with pytest.raises(ExternalServiceError, match="Failed to fetch related videos"):
            await catalog_service.related("seed0000001")


@pytest.mark.unit
class TestCatalogLookups:
    @pytest.mark.asyncio
    async def test_search_videos_uses_placeholders(self, catalog_service, upstream):
        upstream.add_search_hit("abc00000001", title="Hit")
        upstream.search_hits.append({"id": {"kind": "youtube#channel", "channelId": "UC1"}})

        videos = await catalog_service.search_videos("hit")

        assert len(videos) == 1
        assert videos[0].title == "Hit"
        assert videos[0].view_count == "0"
        assert videos[0].duration == "PT0S"
        assert videos[0].thumbnail.endswith("mqdefault.jpg")

    @pytest.mark.asyncio
    async def test_trending_keeps_statistics(self, catalog_service, upstream):
        upstream.add_popular("pop00000001", views="123", duration="PT4M")

        videos = await catalog_service.trending("DE")

        assert videos[0].view_count == "123"
        assert videos[0].duration == "PT4M"
        assert upstream.requests_for("popular")[0].url.params["regionCode"] == "DE"

    @pytest.mark.asyncio
    async def test_video_details(self, catalog_service, upstream):
        upstream.add_video("abc00000001", title="Title", channel="Chan")

        details = await catalog_service.video_details("abc00000001")

        assert details.title == "Title"
        assert details.channel_title == "Chan"
        assert details.thumbnail.endswith("hqdefault.jpg")
        assert details.like_count == "10"

    @pytest.mark.asyncio
    async def test_missing_video_is_not_found(self, catalog_service):
        with pytest.raises(NotFoundError):
            await catalog_service.video_details("missing0001")

    @pytest.mark.asyncio
    async def test_upstream_failure_is_not_not_found(self, catalog_service, upstream):
        upstream.failing.add("videos")

        with pytest.raises(ExternalServiceError):
            await catalog_service.video_details("abc00000001")

    @pytest.mark.asyncio
    async def test_tracks(self, catalog_service, upstream):
        upstream.add_track(77, name="Free Song")

        tracks = await catalog_service.search_tracks("free")
        track = await catalog_service.get_track("77")

        assert tracks[0].id == "77"
        assert tracks[0].artist == "Indie Artist"
        assert track.audio.endswith("trackid=77")

    @pytest.mark.asyncio
    async def test_unknown_track(self, catalog_service):
        with pytest.raises(NotFoundError):
            await catalog_service.get_track("404")

    @pytest.mark.asyncio
    async def test_comments(self, catalog_service, upstream):
        upstream.comments.append(
            {
                "id": "c1",
                "snippet": {
                    "topLevelComment": {
                        "snippet": {
                            "authorDisplayName": "Fan",
                            "textDisplay": "Great",
                            "likeCount": 5,
                            "publishedAt": "2024-01-01T00:00:00Z",
                            "updatedAt": "2024-01-02T00:00:00Z",
                        }
                    }
                },
            }
        )

        comments = await catalog_service.comments("abc00000001")

        assert comments[0].author_display_name == "Fan"
        assert comments[0].like_count == 5
        params = upstream.requests_for("commentThreads")[0].url.params
        assert params["order"] == "relevance"
        assert params["maxResults"] == "20"

    @pytest.mark.asyncio
    async def test_videos_by_ids_batches_requests(self, catalog_service, upstream):
        ids = [f"vid{i:08d}" for i in range(100)]
        for video_id in ids[:-1]:
            upstream.add_video(video_id)

        details = await catalog_service.videos_by_ids(ids)

        assert len(upstream.requests_for("videos")) == 2
        assert all(
            len(r.url.params["id"].split(",")) == 50
            for r in upstream.requests_for("videos")
        )
        assert set(details) == set(ids[:-1])


@pytest.mark.unit
class TestCatalogCache:
    @pytest.mark.asyncio
    async def test_cached_search_skips_upstream(self, catalog_service, upstream, mock_redis):
        catalog_service.cache = CacheManager(url="redis://unused")
        catalog_service.cache.redis_client = mock_redis
        cached = [{"id": "cached00001", "title": "Cached"}]
        mock_redis.get = AsyncMock(return_value=json.dumps(cached).encode())

        videos = await catalog_service.search_videos("anything")

        assert videos[0].id == "cached00001"
        assert upstream.requests == []

    @pytest.mark.asyncio
    async def test_search_result_is_stored(self, catalog_service, upstream, mock_redis):
        catalog_service.cache = CacheManager(url="redis://unused")
        catalog_service.cache.redis_client = mock_redis
        upstream.add_search_hit("abc00000001")

        await catalog_service.search_videos("hit")

        key, payload = mock_redis.set.call_args.args
        assert key.startswith("streamflow:catalog:videos:")
        assert json.loads(payload)[0]["id"] == "abc00000001"
        assert mock_redis.set.call_args.kwargs["ex"] == 60
