"""Manual curation tools for the song and artist catalogs.

- ``link_song_artist``: register that an artist sings a title, creating the
  song (and artist) records the parser could not infer.
- ``merge_duplicate_songs``: fold a title that was split into an
  artist-tagged and an untagged record back into one song.
- ``validate_files``: check the generated JSON against the record models.
"""

import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Union

from pydantic import ValidationError

from .catalog import find_artist
from .ids import generate_artist_id, generate_song_id
from .models import ID_PATTERN, Artist, Song, Video
from .storage import JsonStore, read_json
from .utils import normalize_text

logger = logging.getLogger(__name__)

_ID_RE = re.compile(ID_PATTERN)

LinkMapping = Union[List[Dict[str, Any]], Dict[str, Union[str, List[str]]]]


def link_song_artist(
    title: str, artist_name: str, songs: List[Song], artists: List[Artist]
) -> bool:
    """Make sure a song ``title`` credited to ``artist_name`` exists.

    Returns True when a record was added. A song with the same title but other
    artists is left alone and a separate record is created.
    """
    if not title.strip():
        logger.warning(f"Empty song title for artist {artist_name!r}, skipping")
        return False
    if not artist_name.strip():
        logger.warning(f"Empty artist name for song {title!r}, skipping")
        return False

    artist = find_artist(artist_name, artists)
    artist_id = artist.artist_id if artist else generate_artist_id(artists)

    target = normalize_text(title)
    for song in songs:
        if normalize_text(song.title) == target and artist_id in song.artist_ids:
            logger.info(f"{title!r} is already linked to {artist_name!r}")
            return False

    song_id = generate_song_id(songs)
    songs.append(Song(song_id=song_id, title=title, artist_ids=[artist_id]))
    logger.info(f"Created song {title!r} ({song_id}) for artist {artist_name!r}")

    if artist is None:
        artists.append(Artist(artist_id=artist_id, name=artist_name))
        logger.info(f"Created artist {artist_name!r} ({artist_id})")
    return True


def normalize_link_mapping(mapping: LinkMapping) -> List[Dict[str, Any]]:
    """Accept ``[{"artist": A, "songs": [...]}]`` or ``{A: [...] | "title"}``."""
    if isinstance(mapping, dict):
        return [
            {"artist": artist, "songs": titles if isinstance(titles, list) else [titles]}
            for artist, titles in mapping.items()
        ]
    return list(mapping)


def link_song_artist_list(
    mapping: LinkMapping, songs: List[Song], artists: List[Artist]
) -> int:
    """Link every ``(artist, title)`` pair in ``mapping``; returns how many were added."""
    processed = 0
    linked = 0
    for item in normalize_link_mapping(mapping):
        artist_name = item.get("artist") or ""
        for title in item.get("songs") or []:
            processed += 1
            if link_song_artist(title, artist_name, songs, artists):
                linked += 1
    logger.info(f"Linked {linked} of {processed} song/artist pairs")
    return linked


def parse_link_argument(value: str) -> Optional[LinkMapping]:
    """Return the decoded mapping when ``value`` is a JSON object or array."""
    try:
        decoded = json.loads(value)
    except ValueError:
        return None
    return decoded if isinstance(decoded, (dict, list)) else None


@dataclass
class MergeReport:
    """What ``merge_duplicate_songs`` found and changed."""

    duplicate_titles: List[str] = field(default_factory=list)
    replacements: Dict[str, str] = field(default_factory=dict)
    affected_videos: Dict[str, int] = field(default_factory=dict)
    dry_run: bool = False

    @property
    def references(self) -> int:
        return sum(self.affected_videos.values())


def merge_duplicate_songs(
    songs: List[Song], videos: Sequence[Video], artist_id: str, dry_run: bool = False
) -> MergeReport:
    """Merge same-title song pairs where only one record credits ``artist_id``.

    The crediting record is dropped from ``songs`` and every video timestamp
    pointing at it is repointed to the other record. Titles compare exactly
    and only the first two records per title are considered. With
    ``dry_run`` nothing is mutated.
    """
    report = MergeReport(dry_run=dry_run)

    first_by_title: Dict[str, Song] = {}
    for song in songs:
        original = first_by_title.get(song.title)
        if original is None:
            first_by_title[song.title] = song
            continue

        report.duplicate_titles.append(song.title)
        pair = (original, song)
        tagged = [s for s in pair if artist_id in s.artist_ids]
        untagged = [s for s in pair if artist_id not in s.artist_ids]
        if len(tagged) == 1 and len(untagged) == 1:
            report.replacements[tagged[0].song_id] = untagged[0].song_id

    for video in videos:
        count = sum(1 for ts in video.timestamps if ts.song_id in report.replacements)
        if count:
            report.affected_videos[video.video_id] = count

    logger.info(
        f"Found {len(report.duplicate_titles)} duplicate titles, "
        f"{len(report.replacements)} valid merge pairs"
    )
    for old_id, new_id in report.replacements.items():
        logger.info(f"  {old_id} -> {new_id}")

    if dry_run or not report.replacements:
        return report

    songs[:] = [song for song in songs if song.song_id not in report.replacements]
    for video in videos:
        for ts in video.timestamps:
            if ts.song_id in report.replacements:
                ts.song_id = report.replacements[ts.song_id]

    logger.info(
        f"Removed {len(report.replacements)} duplicate songs, updated "
        f"{report.references} references in {len(report.affected_videos)} videos"
    )
    return report


@dataclass
class ValidationReport:
    valid: List[str] = field(default_factory=list)
    invalid: List[str] = field(default_factory=list)
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def all_valid(self) -> bool:
        return not self.invalid

    def add(self, path: Path, errors: List[str]) -> bool:
        if errors:
            self.invalid.append(str(path))
            self.errors[str(path)] = errors
            return False
        self.valid.append(str(path))
        return True


def _format_errors(prefix: str, error: ValidationError) -> List[str]:
    messages = []
    for detail in error.errors():
        location = ".".join(str(part) for part in detail["loc"])
        messages.append(f"{prefix}{location}: {detail['msg']}")
    return messages


def _check_ids(prefix: str, ids: Iterable[str]) -> List[str]:
    return [f"{prefix}: invalid id {value!r}" for value in ids if not _ID_RE.match(value)]


def _validate_video(data: Any) -> List[str]:
    try:
        video = Video.model_validate(data)
    except ValidationError as e:
        return _format_errors("", e)
    errors = _check_ids("video_id", [video.video_id])
    for index, ts in enumerate(video.timestamps):
        errors += _check_ids(f"timestamps[{index}].song_id", [ts.song_id])
    return errors


def _validate_songs(data: Any) -> List[str]:
    if not isinstance(data, dict) or not isinstance(data.get("songs"), list):
        return ['songs.json must contain a "songs" array']
    errors: List[str] = []
    for index, item in enumerate(data["songs"]):
        prefix = f"songs[{index}]"
        try:
            song = Song.model_validate(item)
        except ValidationError as e:
            errors += _format_errors(f"{prefix}.", e)
            continue
        errors += _check_ids(f"{prefix}.song_id", [song.song_id])
        errors += _check_ids(f"{prefix}.artist_ids", song.artist_ids)
    return errors


def _validate_artists(data: Any) -> List[str]:
    if not isinstance(data, dict) or not isinstance(data.get("artists"), list):
        return ['artists.json must contain an "artists" array']
    errors: List[str] = []
    for index, item in enumerate(data["artists"]):
        prefix = f"artists[{index}]"
        try:
            artist = Artist.model_validate(item)
        except ValidationError as e:
            errors += _format_errors(f"{prefix}.", e)
            continue
        errors += _check_ids(f"{prefix}.artist_id", [artist.artist_id])
    return errors


def validate_file(path: Path, report: ValidationReport) -> bool:
    """Validate one file by its name; unknown files are skipped and count as valid."""
    if path.name == "songs.json":
        validator = _validate_songs
    elif path.name == "artists.json":
        validator = _validate_artists
    elif path.parent.name == "videos" and path.suffix == ".json":
        validator = _validate_video
    else:
        logger.warning(f"Skipping {path}, not a recognized JSON file type")
        return True

    try:
        data = read_json(path)
    except (OSError, ValueError) as e:
        return report.add(path, [f"Error parsing JSON: {e}"])
    return report.add(path, validator(data))


def validate_files(store: JsonStore, paths: Optional[Iterable[str]] = None) -> ValidationReport:
    """Validate ``paths``, or every video file plus both catalogs."""
    report = ValidationReport()
    if paths:
        targets = [Path(p) for p in paths]
    else:
        targets = sorted(store.videos_dir.glob("*.json")) if store.videos_dir.exists() else []
        targets += [p for p in (store.songs_path, store.artists_path) if p.exists()]

    for path in targets:
        validate_file(path, report)

    logger.info(f"Validated {len(targets)} files: {len(report.invalid)} invalid")
    return report
