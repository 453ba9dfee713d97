"""Turn one YouTube video into a persisted setlist record."""

import logging
import re
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from .catalog import ArtistCatalog, SongCatalog
from .config import CollectorConfig
from .models import TimestampRecord, Video, VideoTimestamp
from .prioritizer import select_timestamps
from .storage import JsonStore
from .youtube import YouTubeClient

logger = logging.getLogger(__name__)

THUMBNAIL_PREFERENCE = ("maxres", "high", "standard", "default")
ARTIST_SEPARATOR = re.compile(r",\s*")


@dataclass
class ProcessingResult:
    """Outcome of ingesting a single video."""

    video_id: str
    video: Optional[Video] = None
    new_artists: int = 0
    new_songs: int = 0
    branch: str = ""
    processing_time: float = 0.0
    errors: List[str] = field(default_factory=list)

    @property
    def is_success(self) -> bool:
        return self.video is not None and not self.errors


def choose_thumbnail(thumbnails: Dict[str, Dict[str, Any]]) -> str:
    for size in THUMBNAIL_PREFERENCE:
        url = (thumbnails.get(size) or {}).get("url")
        if url:
            return url
    return ""


def split_artist_names(artist_name: str) -> List[str]:
    """``"A, B"`` -> ``["A", "B"]``; an empty name means no artists."""
    if "," not in artist_name:
        name = artist_name.strip()
        return [name] if name else []
    return [name.strip() for name in ARTIST_SEPARATOR.split(artist_name) if name.strip()]


class VideoProcessor:
    """Fetch, parse, resolve and persist the setlist of a video."""

    def __init__(self, config: CollectorConfig, client: YouTubeClient, store: JsonStore):
        self.config = config
        self.client = client
        self.store = store

    def build_timestamps(
        self,
        records: List[TimestampRecord],
        source: str,
        artists: ArtistCatalog,
        songs: SongCatalog,
    ) -> Tuple[List[VideoTimestamp], int, int]:
        """Resolve every record against the catalogs, in timestamp order.

        Returns the timestamps plus the number of artists and songs created.
        """
        timestamps: List[VideoTimestamp] = []
        new_artists = 0
        new_songs = 0

        for record in records:
            artist_ids = []
            for name in split_artist_names(record.artist_name):
                artist = artists.find_or_create(name)
                new_artists += artist.is_new
                if artist.id not in artist_ids:
                    artist_ids.append(artist.id)

            song = songs.find_or_create(record.song_title, artist_ids)
            new_songs += song.is_new

            timestamps.append(
                VideoTimestamp(
                    time=record.time,
                    original_time=record.original_time,
                    song_id=song.id,
                    comment_source=source,
                    comment_date=record.comment_date,
                )
            )

        return timestamps, new_artists, new_songs

    async def process_video(
        self, video_id: str, force_user_comments: bool = False
    ) -> ProcessingResult:
        """Ingest ``video_id`` and rewrite its JSON file.

        Errors from the API client or the store propagate to the caller.
        """
        start_time = time.time()
        logger.info(f"Processing video: {video_id}")

        metadata = await self.client.fetch_video_metadata(video_id)

        async def fetch_comments():
            return await self.client.fetch_video_comments(video_id)

        selection = await select_timestamps(
            metadata.description, fetch_comments, force_user_comments
        )
        logger.info(
            f"Using timestamps from {selection.branch} ({len(selection.records)} found)"
        )

        artists = ArtistCatalog(self.store.load_artists())
        songs = SongCatalog(self.store.load_songs())
        timestamps, new_artists, new_songs = self.build_timestamps(
            selection.records, selection.source, artists, songs
        )

        video = Video(
            video_id=video_id,
            title=metadata.title,
            start_datetime=metadata.published_at,
            thumbnail_url=choose_thumbnail(metadata.thumbnails),
            timestamps=timestamps,
        )

        if self.config.dry_run:
            logger.info(f"Dry run, not writing data for {video_id}")
        else:
            self.store.save_video(video)
            if artists.changed:
                self.store.save_artists(artists.artists)
            if songs.changed:
                self.store.save_songs(songs.songs)

        result = ProcessingResult(
            video_id=video_id,
            video=video,
            new_artists=new_artists,
            new_songs=new_songs,
            branch=selection.branch,
            processing_time=time.time() - start_time,
        )
        logger.info(
            f"Processed {video_id}: {len(video.timestamps)} timestamps, "
            f"{result.new_artists} new artists, {result.new_songs} new songs"
        )
        return result
