"""Find-or-create identity resolution for artists and songs.

Names and titles compare after NFC normalization and lowercasing. Artists
match on their name or any alias. Songs match on title or any alternate
title, then on artists: two non-empty artist lists must share an id, while an
empty list on either side lets the title decide alone. A title-only match
folds the incoming artist ids into the stored song.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence

from .ids import generate_artist_id, generate_song_id
from .models import Artist, Song
from .utils import normalize_text

logger = logging.getLogger(__name__)


class ResolveResult(NamedTuple):
    id: str
    is_new: bool


def _names_match(target: str, name: str, aliases: Optional[Iterable[str]]) -> bool:
    if normalize_text(name) == target:
        return True
    return any(normalize_text(alias) == target for alias in aliases or ())


def _merge_artist_ids(song: Song, artist_ids: Sequence[str]) -> bool:
    """Append ids missing from ``song.artist_ids``; report whether any were added."""
    added = False
    for artist_id in artist_ids:
        if artist_id not in song.artist_ids:
            song.artist_ids.append(artist_id)
            added = True
    return added


def find_artist(name: str, artists: Sequence[Artist]) -> Optional[Artist]:
    target = normalize_text(name)
    for artist in artists:
        if _names_match(target, artist.name, artist.aliases):
            return artist
    return None


def find_song(title: str, artist_ids: Sequence[str], songs: Sequence[Song]) -> Optional[Song]:
    """First song in catalog order matching ``title`` under the artist-overlap rule."""
    target = normalize_text(title)
    wanted = set(artist_ids)
    for song in songs:
        if not _names_match(target, song.title, song.alternate_titles):
            continue
        if not wanted or not song.artist_ids or wanted.intersection(song.artist_ids):
            return song
    return None


def resolve_artist(
    name: str,
    artists: Sequence[Artist],
    id_generator: Callable[[Sequence[Artist]], str] = generate_artist_id,
) -> ResolveResult:
    artist = find_artist(name, artists)
    if artist is not None:
        return ResolveResult(artist.artist_id, False)
    return ResolveResult(id_generator(artists), True)


def resolve_song(
    title: str,
    artist_ids: Sequence[str],
    songs: Sequence[Song],
    id_generator: Callable[[Sequence[Song]], str] = generate_song_id,
) -> ResolveResult:
    """Resolve a song id, unioning ``artist_ids`` into a matched record in place."""
    song = find_song(title, artist_ids, songs)
    if song is not None:
        _merge_artist_ids(song, artist_ids)
        return ResolveResult(song.song_id, False)
    return ResolveResult(id_generator(songs), True)


@dataclass
class ArtistCatalog:
    """Ordered artist list shared by every lookup of one ingestion run."""

    artists: List[Artist]
    changed: bool = False
    id_generator: Callable[[Sequence[Artist]], str] = generate_artist_id

    def find_or_create(self, name: str) -> ResolveResult:
        result = resolve_artist(name, self.artists, self.id_generator)
        if result.is_new:
            self.artists.append(Artist(artist_id=result.id, name=name))
            self.changed = True
            logger.info(f"New artist: {name} ({result.id})")
        return result


@dataclass
class SongCatalog:
    """Ordered song list; records created during a run are visible to later lookups."""

    songs: List[Song]
    changed: bool = False
    id_generator: Callable[[Sequence[Song]], str] = generate_song_id

    def find_or_create(self, title: str, artist_ids: Sequence[str]) -> ResolveResult:
        song = find_song(title, artist_ids, self.songs)
        if song is not None:
            if _merge_artist_ids(song, artist_ids):
                self.changed = True
                logger.debug(f"Linked artists {list(artist_ids)} to song {song.song_id}")
            return ResolveResult(song.song_id, False)

        song_id = self.id_generator(self.songs)
        unique_ids = list(dict.fromkeys(artist_ids))
        self.songs.append(Song(song_id=song_id, title=title, artist_ids=unique_ids))
        self.changed = True
        logger.info(f"New song: {title} ({song_id})")
        return ResolveResult(song_id, True)
