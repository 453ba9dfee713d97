"""Thin async client for the YouTube Data API v3 endpoints the collector needs."""

import asyncio
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

import httpx

from .config import YouTubeConfig
from .errors import FetchError, MissingCredential, NotFound
from .prioritizer import Comment

logger = logging.getLogger(__name__)

AVAILABLE_PRIVACY_STATUSES = ("public", "unlisted")


@dataclass
class VideoMetadata:
    """Snippet fields of a single video."""

    video_id: str
    title: str
    description: str
    published_at: str
    thumbnails: Dict[str, Dict[str, Any]] = field(default_factory=dict)


@dataclass
class StreamSummary:
    """A channel upload that looks like a karaoke stream."""

    video_id: str
    title: str
    published_at: str


class YouTubeClient:
    """Wraps the ``videos``, ``commentThreads``, ``search``, ``channels`` and
    ``playlistItems`` endpoints.

    Any non-2xx response raises :class:`FetchError`; there is no retry.
    """

    def __init__(
        self,
        config: YouTubeConfig,
        api_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.api_key = api_key or os.environ.get(config.api_key_env, "")
        if not self.api_key:
            raise MissingCredential(f"{config.api_key_env} environment variable is not set")

        self.http_client = httpx.AsyncClient(
            timeout=httpx.Timeout(config.timeout_seconds),
            transport=transport,
        )

    async def __aenter__(self) -> "YouTubeClient":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()

    async def close(self) -> None:
        await self.http_client.aclose()

    async def _get(self, endpoint: str, params: Dict[str, Any]) -> Dict[str, Any]:
        url = f"{self.config.base_url}/{endpoint}"
        logger.debug(f"GET {url} {params}")
        response = await self.http_client.get(url, params={**params, "key": self.api_key})
        if not response.is_success:
            raise FetchError(
                f"Failed to fetch {endpoint}: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response.json()

    async def fetch_video_metadata(self, video_id: str) -> VideoMetadata:
        data = await self._get("videos", {"part": "snippet", "id": video_id})
        items = data.get("items") or []
        if not items:
            raise NotFound(f"Video not found: {video_id}")

        snippet = items[0].get("snippet", {})
        return VideoMetadata(
            video_id=video_id,
            title=snippet.get("title", ""),
            description=snippet.get("description", ""),
            published_at=snippet.get("publishedAt", ""),
            thumbnails=snippet.get("thumbnails") or {},
        )

    async def fetch_video_comments(self, video_id: str) -> List[Comment]:
        """Top-level comments in relevance order, up to ``max_comment_pages`` pages."""
        comments: List[Comment] = []
        page_token: Optional[str] = None

        for page in range(self.config.max_comment_pages):
            params: Dict[str, Any] = {
                "part": "snippet",
                "videoId": video_id,
                "maxResults": self.config.comments_per_page,
                "order": "relevance",
            }
            if page_token:
                params["pageToken"] = page_token

            data = await self._get("commentThreads", params)
            for item in data.get("items") or []:
                snippet = item["snippet"]["topLevelComment"]["snippet"]
                comments.append(
                    Comment(
                        body=snippet.get("textDisplay", ""),
                        published_at=snippet.get("publishedAt", ""),
                        like_count=snippet.get("likeCount", 0),
                    )
                )

            page_token = data.get("nextPageToken")
            if not page_token:
                break

        logger.debug(f"Fetched {len(comments)} comments for {video_id}")
        return comments

    async def fetch_recent_streams(self, channel_id: str) -> List[str]:
        """Ids of the channel's latest completed live streams whose title has the keyword."""
        data = await self._get(
            "search",
            {
                "part": "id,snippet",
                "channelId": channel_id,
                "type": "video",
                "eventType": "completed",
                "order": "date",
                "maxResults": 50,
            },
        )
        items = data.get("items") or []
        video_ids = [
            item["id"]["videoId"]
            for item in items
            if self.config.title_keyword in item.get("snippet", {}).get("title", "")
        ]
        logger.info(
            f"Found {len(items)} recent videos, {len(video_ids)} with "
            f"{self.config.title_keyword!r} in the title"
        )
        return video_ids

    async def fetch_uploads_playlist_id(self, channel_id: str) -> str:
        data = await self._get("channels", {"part": "contentDetails", "id": channel_id})
        items = data.get("items") or []
        if not items:
            raise NotFound(f"Channel not found: {channel_id}")
        return items[0]["contentDetails"]["relatedPlaylists"]["uploads"]

    async def fetch_all_streams(self, channel_id: str) -> List[StreamSummary]:
        """Walk the uploads playlist and keep the karaoke streams."""
        playlist_id = await self.fetch_uploads_playlist_id(channel_id)
        logger.info(f"Fetching videos from uploads playlist: {playlist_id}")

        streams: List[StreamSummary] = []
        total = 0
        page_token: Optional[str] = None
        while True:
            params: Dict[str, Any] = {
                "part": "snippet",
                "maxResults": 50,
                "playlistId": playlist_id,
            }
            if page_token:
                params["pageToken"] = page_token

            data = await self._get("playlistItems", params)
            items = data.get("items") or []
            total += len(items)
            for item in items:
                snippet = item["snippet"]
                if self.config.title_keyword in snippet.get("title", ""):
                    streams.append(
                        StreamSummary(
                            video_id=snippet["resourceId"]["videoId"],
                            title=snippet["title"],
                            published_at=snippet.get("publishedAt", ""),
                        )
                    )

            page_token = data.get("nextPageToken")
            if not page_token:
                break
            await asyncio.sleep(self.config.request_delay_seconds)

        logger.info(f"Scanned {total} uploads, found {len(streams)} karaoke streams")
        return streams

    async def is_video_available(self, video_id: str) -> bool:
        """False for deleted or private videos, which come back with no items."""
        data = await self._get("videos", {"part": "status", "id": video_id})
        items = data.get("items") or []
        if not items:
            return False
        status = items[0].get("status")
        if not status:
            return True
        return status.get("privacyStatus") in AVAILABLE_PRIVACY_STATUSES
