"""Unit tests for youtube.py using httpx.MockTransport."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock, patch

import httpx
import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from setlist.config import YouTubeConfig
from setlist.errors import FetchError, MissingCredential, NotFound
from setlist.youtube import YouTubeClient
from tests.fixtures.test_data import (
    SAMPLE_VIDEO_ITEM,
    comment_thread,
    playlist_item,
    search_item,
)


def make_client(handler, **config_overrides):
    """Create a client whose requests are answered by ``handler``."""
    config = YouTubeConfig(request_delay_seconds=0, **config_overrides)
    return YouTubeClient(config, api_key="test-key", transport=httpx.MockTransport(handler))


class TestClientSetup:
    def test_missing_api_key(self, monkeypatch):
        monkeypatch.delenv("YOUTUBE_API_KEY", raising=False)
        with pytest.raises(MissingCredential):
            YouTubeClient(YouTubeConfig())

    def test_api_key_from_env(self, monkeypatch):
        monkeypatch.setenv("YOUTUBE_API_KEY", "env-key")
        assert YouTubeClient(YouTubeConfig()).api_key == "env-key"


class TestVideoMetadata:
    """Test cases for the videos endpoint."""

    @pytest.mark.asyncio
    async def test_fetch_metadata(self):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json={"items": [SAMPLE_VIDEO_ITEM]})

        client = make_client(handler)
        metadata = await client.fetch_video_metadata("abcdefghijk")
        await client.close()

        assert metadata.title == "【歌枠】まったり歌います"
        assert metadata.published_at == "2024-05-01T12:00:00Z"
        assert "maxres" in metadata.thumbnails
        assert seen[0].url.path == "/youtube/v3/videos"
        assert seen[0].url.params["part"] == "snippet"
        assert seen[0].url.params["id"] == "abcdefghijk"
        assert seen[0].url.params["key"] == "test-key"

    @pytest.mark.asyncio
    async def test_not_found(self):
        client = make_client(lambda request: httpx.Response(200, json={"items": []}))
        with pytest.raises(NotFound):
            await client.fetch_video_metadata("missing0000")
        await client.close()

    @pytest.mark.asyncio
    async def test_http_error(self):
        client = make_client(lambda request: httpx.Response(403, json={"error": {}}))
        with pytest.raises(FetchError) as exc_info:
            await client.fetch_video_metadata("abcdefghijk")
        await client.close()
        assert exc_info.value.status_code == 403
        assert "Forbidden" in str(exc_info.value)


class TestComments:
    """Test cases for the commentThreads endpoint."""

    @pytest.mark.asyncio
    async def test_follows_page_tokens(self):
        tokens = []

        def handler(request):
            token = request.url.params.get("pageToken")
            tokens.append(token)
            if token is None:
                return httpx.Response(
                    200,
                    json={"items": [comment_thread("1:00 A", likes=2)], "nextPageToken": "p2"},
                )
            return httpx.Response(200, json={"items": [comment_thread("2:00 B", likes=5)]})

        client = make_client(handler)
        comments = await client.fetch_video_comments("abcdefghijk")
        await client.close()

        assert tokens == [None, "p2"]
        assert [c.body for c in comments] == ["1:00 A", "2:00 B"]
        assert [c.like_count for c in comments] == [2, 5]
        assert comments[0].published_at == "2024-05-02T00:00:00Z"

    @pytest.mark.asyncio
    async def test_page_limit(self):
        calls = []

        def handler(request):
            calls.append(request)
            assert request.url.params["order"] == "relevance"
            assert request.url.params["maxResults"] == "100"
            return httpx.Response(
                200, json={"items": [comment_thread("x")], "nextPageToken": "more"}
            )

        client = make_client(handler, max_comment_pages=3)
        comments = await client.fetch_video_comments("abcdefghijk")
        await client.close()

        assert len(calls) == 3
        assert len(comments) == 3


class TestChannelDiscovery:
    """Test cases for search, channels and playlistItems."""

    @pytest.mark.asyncio
    async def test_recent_streams_filtered_by_keyword(self):
        def handler(request):
            params = request.url.params
            assert params["eventType"] == "completed"
            assert params["order"] == "date"
            return httpx.Response(
                200,
                json={
                    "items": [
                        search_item("v1111111111", "【歌枠】夜の部"),
                        search_item("v2222222222", "雑談配信"),
                    ]
                },
            )

        client = make_client(handler)
        assert await client.fetch_recent_streams("UC123") == ["v1111111111"]
        await client.close()

    @pytest.mark.asyncio
    async def test_uploads_playlist_not_found(self):
        client = make_client(lambda request: httpx.Response(200, json={"items": []}))
        with pytest.raises(NotFound):
            await client.fetch_uploads_playlist_id("UC404")
        await client.close()

    @pytest.mark.asyncio
    async def test_fetch_all_streams(self):
        def handler(request):
            if request.url.path.endswith("/channels"):
                return httpx.Response(
                    200,
                    json={"items": [{"contentDetails": {"relatedPlaylists": {"uploads": "UU1"}}}]},
                )
            assert request.url.params["playlistId"] == "UU1"
            if request.url.params.get("pageToken") is None:
                return httpx.Response(
                    200,
                    json={
                        "items": [
                            playlist_item("v1111111111", "歌枠 #1", "2024-01-01T00:00:00Z"),
                            playlist_item("v2222222222", "ゲーム", "2024-01-02T00:00:00Z"),
                        ],
                        "nextPageToken": "p2",
                    },
                )
            return httpx.Response(
                200,
                json={"items": [playlist_item("v3333333333", "歌枠 #2", "2024-02-01T00:00:00Z")]},
            )

        client = make_client(handler)
        with patch("setlist.youtube.asyncio.sleep", new_callable=AsyncMock) as sleep:
            streams = await client.fetch_all_streams("UC123")
        await client.close()

        assert [s.video_id for s in streams] == ["v1111111111", "v3333333333"]
        assert streams[1].published_at == "2024-02-01T00:00:00Z"
        sleep.assert_awaited_once()


class TestAvailability:
    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload,expected",
        [
            ({"items": []}, False),
            ({"items": [{"status": {"privacyStatus": "public"}}]}, True),
            ({"items": [{"status": {"privacyStatus": "unlisted"}}]}, True),
            ({"items": [{"status": {"privacyStatus": "private"}}]}, False),
            ({"items": [{"id": "x"}]}, True),
        ],
    )
    async def test_is_video_available(self, payload, expected):
        client = make_client(lambda request: httpx.Response(200, json=payload))
        assert await client.is_video_available("abcdefghijk") is expected
        await client.close()
