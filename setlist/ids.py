"""Random 11-character ids for songs and artists (``^[A-Za-z0-9_-]{11}$``)."""

import secrets
import string
from typing import Iterable, Sequence

from .models import Artist, Song

ID_ALPHABET = string.ascii_uppercase + string.ascii_lowercase + string.digits + "_-"
ID_LENGTH = 11


def generate_unique_id(existing_ids: Iterable[str] = ()) -> str:
    """Generate an id that does not collide with ``existing_ids``."""
    taken = set(existing_ids)
    while True:
        candidate = "".join(secrets.choice(ID_ALPHABET) for _ in range(ID_LENGTH))
        if candidate not in taken:
            return candidate


def generate_artist_id(artists: Sequence[Artist]) -> str:
    return generate_unique_id(artist.artist_id for artist in artists)


def generate_song_id(songs: Sequence[Song]) -> str:
    return generate_unique_id(song.song_id for song in songs)
