"""JSON file persistence for videos, songs and artists.

Layout under the public directory::

    videos/<video_id>.json
    songs.json               {"songs": [...]}
    artists.json             {"artists": [...]}
    api/videos-list.json     {"videos": [...], "generated_at": ..., "channel_id": ...}

Every write rewrites the whole file as UTF-8 JSON with 2-space indentation
and no trailing newline, so an unchanged record produces identical bytes.
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List, Optional, Set

from pydantic import TypeAdapter

from .config import StorageConfig
from .models import Artist, Song, Video, VideosList, dump_record

logger = logging.getLogger(__name__)

_ARTISTS_ADAPTER = TypeAdapter(List[Artist])
_SONGS_ADAPTER = TypeAdapter(List[Song])


def write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(json.dumps(data, ensure_ascii=False, indent=2))


def read_json(path: Path) -> Any:
    with open(path, "r", encoding="utf-8") as f:
        return json.load(f)


def load_excluded_video_ids(path: str) -> Set[str]:
    """Read a JSON array of video ids that must never be ingested.

    A missing or empty file means no exclusions. Unreadable content is logged
    and treated the same way so a broken exclusion list never stops a batch.
    """
    excluded_path = Path(path)
    if not excluded_path.exists():
        return set()

    try:
        raw = excluded_path.read_text(encoding="utf-8").strip()
        if not raw:
            return set()
        parsed = json.loads(raw)
    except (OSError, ValueError) as e:
        logger.warning(f"Failed to read {path}, continuing without exclusions: {e}")
        return set()

    if not isinstance(parsed, list):
        logger.warning(f"{path} should contain an array of strings, ignoring its contents")
        return set()

    return {item.strip() for item in parsed if isinstance(item, str) and item.strip()}


class JsonStore:
    """Reads and writes the public JSON collections."""

    def __init__(self, config: StorageConfig):
        self.config = config
        self.public_dir = Path(config.public_dir)
        self.videos_dir = self.public_dir / "videos"
        self.api_dir = self.public_dir / "api"
        self.songs_path = self.public_dir / "songs.json"
        self.artists_path = self.public_dir / "artists.json"
        self.videos_list_path = self.api_dir / "videos-list.json"

    def video_path(self, video_id: str) -> Path:
        return self.videos_dir / f"{video_id}.json"

    # Catalogs

    def _read_catalog(self, path: Path, key: str) -> List[Any]:
        data = read_json(path)
        if not isinstance(data, dict):
            raise ValueError(f"{path} must contain a JSON object with a \"{key}\" array")
        return data.get(key, [])

    def load_artists(self) -> List[Artist]:
        if not self.artists_path.exists():
            return []
        return _ARTISTS_ADAPTER.validate_python(self._read_catalog(self.artists_path, "artists"))

    def load_songs(self) -> List[Song]:
        if not self.songs_path.exists():
            return []
        return _SONGS_ADAPTER.validate_python(self._read_catalog(self.songs_path, "songs"))

    def save_artists(self, artists: List[Artist]) -> None:
        write_json(self.artists_path, {"artists": [dump_record(a) for a in artists]})
        logger.info(f"Saved {len(artists)} artists to {self.artists_path}")

    def save_songs(self, songs: List[Song]) -> None:
        write_json(self.songs_path, {"songs": [dump_record(s) for s in songs]})
        logger.info(f"Saved {len(songs)} songs to {self.songs_path}")

    # Videos

    def save_video(self, video: Video) -> Path:
        path = self.video_path(video.video_id)
        write_json(path, dump_record(video))
        logger.info(f"Saved video data to {path}")
        return path

    def load_video(self, video_id: str) -> Video:
        return Video.model_validate(read_json(self.video_path(video_id)))

    def video_exists(self, video_id: str) -> bool:
        return self.video_path(video_id).exists()

    def delete_video(self, video_id: str) -> bool:
        path = self.video_path(video_id)
        if not path.exists():
            return False
        path.unlink()
        logger.info(f"Deleted {path}")
        return True

    def list_video_ids(self) -> List[str]:
        if not self.videos_dir.exists():
            return []
        return sorted(path.stem for path in self.videos_dir.glob("*.json"))

    def generate_videos_list(self, channel_id: Optional[str] = None) -> VideosList:
        """Rewrite ``api/videos-list.json`` from the files in ``videos/``."""
        generated_at = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        videos_list = VideosList(
            videos=self.list_video_ids(),
            generated_at=generated_at.replace("+00:00", "Z"),
            channel_id=channel_id or "unknown",
        )
        write_json(self.videos_list_path, videos_list.model_dump())
        logger.info(f"Generated videos-list.json with {len(videos_list.videos)} videos")
        return videos_list

    def stored_channel_id(self) -> Optional[str]:
        if not self.videos_list_path.exists():
            return None
        return read_json(self.videos_list_path).get("channel_id")

    def load_excluded_video_ids(self, path: Optional[str] = None) -> Set[str]:
        return load_excluded_video_ids(path or self.config.excluded_ids_path)

    def destroy(self, current_channel_id: str, force: bool = False) -> Optional[int]:
        """Delete all generated data, e.g. before switching to another channel.

        Nothing is deleted when the stored list belongs to ``current_channel_id``
        unless ``force`` is set; that case returns None. Otherwise returns the
        number of files removed.
        """
        stored = self.stored_channel_id()
        if self.videos_list_path.exists():
            if stored == current_channel_id and not force:
                logger.info("Current channel ID matches stored channel ID, nothing deleted")
                return None
            if stored != current_channel_id:
                logger.info(f"Channel ID mismatch: stored={stored}, current={current_channel_id}")
            else:
                logger.info("Force delete enabled, deleting data for the current channel")

        deleted = 0
        for path in (self.videos_list_path, self.songs_path, self.artists_path):
            if path.exists():
                path.unlink()
                deleted += 1
        if self.videos_dir.exists():
            for path in self.videos_dir.glob("*.json"):
                path.unlink()
                deleted += 1

        logger.info(f"Deleted {deleted} files")
        return deleted
