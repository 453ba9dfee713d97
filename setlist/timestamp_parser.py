"""Line-oriented setlist extraction from descriptions and comments.

Each line is scanned for the first ``H:MM:SS`` / ``M:SS`` shaped substring.
The text after it is the song, optionally split into title and artist by a
whitespace-surrounded run of ``/`` or ``-``. A timestamp alone on its line
borrows the following line as its text.

Candidates are dropped (never raised) when the text is an announcement, a
bare "声入り" annotation, or a zero-second timestamp inside a comment. Zero
timestamps survive in descriptions because the source prioritizer reads them
as YouTube chapter markers.
"""

import logging
import re
from typing import Callable, List, Optional, Tuple

from .models import CommentSource, TimestampRecord
from .utils import parse_duration

logger = logging.getLogger(__name__)

TIMESTAMP_PATTERN = re.compile(r"(?:[0-9]{1,2}:)?[0-9]{1,2}:[0-9]{1,2}")
DELIMITER_PATTERN = re.compile(r"\s+(?:/+|-+)\s+")

ANNOUNCEMENT_MARKER = "告知:"
VOCALS_ONLY_MARKER = "声入り"

SkipRule = Callable[[int, str, str], bool]

# (reason, predicate(time, text, source)); first hit discards the candidate
SKIP_RULES: Tuple[Tuple[str, SkipRule], ...] = (
    ("announcement", lambda time, text, source: ANNOUNCEMENT_MARKER in text),
    ("vocals-only annotation", lambda time, text, source: text.strip() == VOCALS_ONLY_MARKER),
    ("zero seconds in comment", lambda time, text, source: time == 0 and source == "comment"),
)


def skip_reason(time: int, text: str, source: str) -> Optional[str]:
    """Return why a candidate should be discarded, or None to keep it."""
    for reason, rule in SKIP_RULES:
        if rule(time, text, source):
            return reason
    return None


def split_title_artist(text: str) -> Tuple[str, str]:
    """Split ``"title / artist"`` on the first spaced ``/``, ``//``, ``-``, ``---``...

    Hyphens inside words (``good-bye``, ``n-buna``) never split because the
    delimiter needs whitespace on both sides. When either half would be empty
    the whole text is the title.
    """
    match = DELIMITER_PATTERN.search(text)
    if match:
        title = text[: match.start()].strip()
        artist = text[match.end() :].strip()
        if title and artist:
            return title, artist
    return text, ""


def parse_timestamps(text: str, source: CommentSource = "description") -> List[TimestampRecord]:
    """Extract timestamp records from ``text`` in the order they appear."""
    lines = text.split("\n")
    records: List[TimestampRecord] = []
    logger.debug(f"Processing {len(lines)} lines of {source} text")

    index = 0
    while index < len(lines):
        line = lines[index].strip()
        index += 1
        if not line:
            continue

        match = TIMESTAMP_PATTERN.search(line)
        if not match:
            continue

        original_time = match.group(0)
        time = parse_duration(original_time)
        remaining = line[match.end() :].strip()

        next_line_used = False
        if not remaining and index < len(lines):
            remaining = lines[index].strip()
            next_line_used = True

        reason = skip_reason(time, remaining, source)
        if reason:
            logger.debug(f"Skipping timestamp {original_time} ({reason})")
            continue

        song_title, artist_name = split_title_artist(remaining)
        if not song_title:
            continue

        records.append(
            TimestampRecord(
                time=time,
                original_time=original_time,
                song_title=song_title,
                artist_name=artist_name,
            )
        )
        logger.debug(f"Added timestamp {original_time}: {song_title!r} / {artist_name!r}")

        if next_line_used:
            index += 1

    logger.debug(f"Found {len(records)} timestamps in {source}")
    return records
