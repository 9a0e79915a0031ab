"""
API tests for the catalog endpoints.
"""

import pytest


@pytest.mark.api
class TestTracks:
    @pytest.mark.asyncio
    async def test_search(self, client, upstream):
        upstream.add_track(7, name="Free Song")

        response = await client.get("/api/songs/search", params={"q": "free"})

        assert response.status_code == 200
        track = response.json()[0]
        assert track["id"] == "7"
        assert track["artist"] == "Indie Artist"
        assert track["audio"].endswith("trackid=7")

    @pytest.mark.asyncio
    async def test_search_requires_query(self, client):
        response = await client.get("/api/songs/search")

        assert response.status_code == 400
        assert response.json()["message"] == 'Query parameter "q" is required'

    @pytest.mark.asyncio
    async def test_stream(self, client, upstream):
        upstream.add_track(7)

        found = await client.get("/api/songs/stream/7")
        missing = await client.get("/api/songs/stream/8")

        assert found.json()["id"] == "7"
        assert missing.status_code == 404


@pytest.mark.api
class TestYouTube:
    @pytest.mark.asyncio
    async def test_search_uses_camel_case(self, client, upstream):
        upstream.add_search_hit("abc00000001", title="Hit")

        response = await client.get("/api/songs/youtube/search", params={"q": "hit"})

        video = response.json()[0]
        assert video["id"] == "abc00000001"
        assert video["viewCount"] == "0"
        assert video["duration"] == "PT0S"
        assert video["publishedAt"] == "2024-02-01T00:00:00Z"

    @pytest.mark.asyncio
    async def test_trending_region(self, client, upstream):
        upstream.add_popular("pop00000001")

        response = await client.get("/api/songs/youtube/trending", params={"region": "gb"})
        default = await client.get("/api/songs/youtube/trending")

        assert response.json()[0]["id"] == "pop00000001"
        regions = [r.url.params["regionCode"] for r in upstream.requests_for("popular")]
        assert regions == ["GB", "US"]
        assert default.status_code == 200

    @pytest.mark.asyncio
    async def test_related(self, client, upstream):
        upstream.add_video("seed0000001", title="Band - Song (Live)")
        for i in range(12):
            upstream.add_search_hit(f"rel{i:08d}")

        response = await client.get(
            "/api/songs/youtube/related", params={"videoId": "seed0000001"}
        )

        assert len(response.json()) == 10

    @pytest.mark.asyncio
    async def test_related_unavailable(self, client, upstream):
        upstream.failing.update({"videos", "popular"})

        response = await client.get(
            "/api/songs/youtube/related", params={"videoId": "seed0000001"}
        )

        assert response.status_code == 502
        assert response.json()["error"] == "ExternalServiceError"

    @pytest.mark.asyncio
    async def test_video(self, client, upstream):
        upstream.add_video("abc00000001", title="Title")

        found = await client.get("/api/songs/youtube/video", params={"videoId": "abc00000001"})
        missing = await client.get("/api/songs/youtube/video", params={"videoId": "nope"})
        no_id = await client.get("/api/songs/youtube/video")

        assert found.json()["channelTitle"] == "Some Channel"
        assert found.json()["likeCount"] == "10"
        assert missing.status_code == 404
        assert no_id.status_code == 400

    @pytest.mark.asyncio
    async def test_playlist(self, client, upstream):
        upstream.playlists["PL1"] = {
            "id": "PL1",
            "snippet": {"title": "Hits", "channelTitle": "Label", "description": "d"},
        }

        found = await client.get("/api/songs/youtube/playlist", params={"playlistId": "PL1"})
        missing = await client.get("/api/songs/youtube/playlist", params={"playlistId": "PL2"})

        assert found.json()["title"] == "Hits"
        assert missing.status_code == 404

    @pytest.mark.asyncio
    async def test_comments_upstream_failure(self, client, upstream):
        upstream.failing.add("commentThreads")

        response = await client.get(
            "/api/songs/youtube/comments", params={"videoId": "abc00000001"}
        )

        assert response.status_code == 502
