"""Record types for parsed timestamps and the persisted JSON collections."""

import re
from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

ID_PATTERN = r"^[A-Za-z0-9_-]{11}$"
ORIGINAL_TIME_PATTERN = re.compile(r"^(\d{1,2}:)?\d{1,2}:\d{1,2}$")

CommentSource = Literal["description", "comment"]


@dataclass
class TimestampRecord:
    """One ``(time, title, artist)`` candidate recovered from free text."""

    time: int
    original_time: str
    song_title: str
    artist_name: str = ""
    comment_date: Optional[str] = None


class Artist(BaseModel):
    """Entry of ``artists.json``."""

    model_config = ConfigDict(extra="forbid")

    artist_id: str
    name: str
    aliases: Optional[List[str]] = None


class Song(BaseModel):
    """Entry of ``songs.json``.

    ``artist_ids`` is mutated in place when a title-only lookup matches, so
    the model stays mutable.
    """

    model_config = ConfigDict(extra="forbid")

    song_id: str
    title: str
    artist_ids: List[str] = Field(default_factory=list)
    alternate_titles: Optional[List[str]] = None
    description: Optional[str] = None

    @field_validator("artist_ids")
    @classmethod
    def _no_duplicate_artists(cls, value: List[str]) -> List[str]:
        if len(set(value)) != len(value):
            raise ValueError("artist_ids must not contain duplicates")
        return value


class VideoTimestamp(BaseModel):
    model_config = ConfigDict(extra="forbid")

    time: int = Field(ge=0)
    original_time: str
    song_id: str
    comment_source: CommentSource
    comment_date: Optional[str] = None
    description: Optional[str] = None

    @field_validator("original_time")
    @classmethod
    def _timestamp_shape(cls, value: str) -> str:
        if not ORIGINAL_TIME_PATTERN.match(value):
            raise ValueError(f"original_time {value!r} is not H:MM:SS or M:SS")
        return value


class Video(BaseModel):
    """One ``videos/<video_id>.json`` document."""

    model_config = ConfigDict(extra="forbid")

    video_id: str
    title: str
    start_datetime: str
    thumbnail_url: str
    timestamps: List[VideoTimestamp] = Field(default_factory=list)


class VideosList(BaseModel):
    """``api/videos-list.json`` consumed by the front-end."""

    videos: List[str]
    generated_at: str
    channel_id: str


def dump_record(model: BaseModel) -> dict:
    """Serialize a record for JSON output, dropping unset optional fields."""
    return model.model_dump(exclude_none=True)
