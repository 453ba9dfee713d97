"""Choose between description and comment timestamps for a stream."""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, List, Sequence

from .models import CommentSource, TimestampRecord
from .timestamp_parser import parse_timestamps
from .utils import strip_html

logger = logging.getLogger(__name__)

ZERO_TIMESTAMP_FORMS = frozenset({"0:00", "00:00", "0:00:00", "00:00:00"})

BRANCH_DESCRIPTION = "description"
BRANCH_FORCED_COMMENTS = "comments (forced)"
BRANCH_COMMENTS = "comments"
BRANCH_FALLBACK = "description (fallback)"


@dataclass
class Comment:
    """A top-level comment as returned by the comment threads endpoint."""

    body: str
    published_at: str
    like_count: int = 0


@dataclass
class TimestampSelection:
    """Records chosen for a video, with the source label stored on each."""

    records: List[TimestampRecord] = field(default_factory=list)
    source: CommentSource = "description"
    branch: str = BRANCH_DESCRIPTION


CommentFetcher = Callable[[], Awaitable[List[Comment]]]


def has_zero_timestamp(records: Sequence[TimestampRecord]) -> bool:
    """True when any record sits at 0 seconds, i.e. a chapter-marker list."""
    return any(
        record.time == 0 or record.original_time in ZERO_TIMESTAMP_FORMS for record in records
    )


def parse_comment_timestamps(comments: Sequence[Comment]) -> List[TimestampRecord]:
    """Parse every comment, most-liked first, tagging records with the comment date."""
    ordered = sorted(comments, key=lambda comment: comment.like_count, reverse=True)
    records: List[TimestampRecord] = []
    for comment in ordered:
        for record in parse_timestamps(strip_html(comment.body), source="comment"):
            record.comment_date = comment.published_at
            records.append(record)
    return records


async def select_timestamps(
    description: str,
    fetch_comments: CommentFetcher,
    force_user_comments: bool = False,
) -> TimestampSelection:
    """Pick the timestamp source for one video.

    A description whose list starts at 0:00 follows the chapter convention and
    is trusted as-is; comments are not fetched in that case. Otherwise the
    comments win whenever they yield anything, and the description is the
    fallback.
    """
    if force_user_comments:
        records = parse_comment_timestamps(await fetch_comments())
        return TimestampSelection(records, "comment", BRANCH_FORCED_COMMENTS)

    description_records = parse_timestamps(description, source="description")
    if description_records and has_zero_timestamp(description_records):
        return TimestampSelection(description_records, "description", BRANCH_DESCRIPTION)

    comment_records = parse_comment_timestamps(await fetch_comments())
    if comment_records:
        return TimestampSelection(comment_records, "comment", BRANCH_COMMENTS)

    logger.debug("No timestamps in comments, falling back to description")
    return TimestampSelection(description_records, "description", BRANCH_FALLBACK)
