"""Unit tests for timestamp_parser.py."""

import re
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from setlist.timestamp_parser import parse_timestamps, skip_reason, split_title_artist
from tests.fixtures.test_data import CHAPTER_DESCRIPTION


class TestSplitTitleArtist:
    """Test cases for the title / artist delimiter."""

    @pytest.mark.parametrize(
        "text,expected",
        [
            ("春泥棒 / ヨルシカ", ("春泥棒", "ヨルシカ")),
            ("白日 // King Gnu", ("白日", "King Gnu")),
            ("Lemon - 米津玄師", ("Lemon", "米津玄師")),
            ("曲 --- 歌手", ("曲", "歌手")),
            ("A / B / C", ("A", "B / C")),
        ],
    )
    def test_delimiters(self, text, expected):
        assert split_title_artist(text) == expected

    @pytest.mark.parametrize("text", ["good-bye", "n-buna", "AC/DC", "Song/Artist"])
    def test_unspaced_delimiters_do_not_split(self, text):
        """Test that hyphens and slashes inside words are part of the title."""
        assert split_title_artist(text) == (text, "")

    def test_no_delimiter(self):
        assert split_title_artist("ただの曲名") == ("ただの曲名", "")


class TestSkipReason:
    def test_announcement(self):
        assert skip_reason(60, "告知: 新グッズ", "description") == "announcement"

    def test_vocals_only(self):
        assert skip_reason(60, "声入り", "description") == "vocals-only annotation"

    def test_vocals_only_must_be_exact(self):
        assert skip_reason(60, "声入りバージョン", "description") is None

    def test_zero_in_comment(self):
        assert skip_reason(0, "開始", "comment") == "zero seconds in comment"

    def test_zero_in_description_kept(self):
        assert skip_reason(0, "開始", "description") is None


class TestParseTimestamps:
    """Test cases for line-oriented timestamp extraction."""

    def test_chapter_description(self):
        """Test a typical description with mixed delimiters."""
        records = parse_timestamps(CHAPTER_DESCRIPTION)

        assert [r.time for r in records] == [0, 195, 522, 3723]
        assert [r.original_time for r in records] == ["0:00", "3:15", "8:42", "1:02:03"]
        assert [(r.song_title, r.artist_name) for r in records] == [
            ("オープニング", ""),
            ("春泥棒", "ヨルシカ"),
            ("Lemon", "米津玄師"),
            ("白日", "King Gnu"),
        ]
        assert all(r.comment_date is None for r in records)

    def test_original_time_is_verbatim(self):
        records = parse_timestamps("03:15 曲")
        assert records[0].original_time == "03:15"
        assert records[0].time == 195

    def test_comma_and_word_hyphen_before_slash(self):
        """Test only the spaced slash splits a title holding a comma and a hyphen."""
        records = parse_timestamps("01:15:30 rain stops, good-bye / におP")

        assert len(records) == 1
        assert records[0].time == 4530
        assert records[0].original_time == "01:15:30"
        assert records[0].song_title == "rain stops, good-bye"
        assert records[0].artist_name == "におP"

    def test_no_timestamps(self):
        assert parse_timestamps("今日はありがとう！\n\nまたね") == []

    def test_empty_text(self):
        assert parse_timestamps("") == []

    def test_timestamp_alone_uses_next_line(self):
        """Test a bare timestamp takes the following line as its song."""
        records = parse_timestamps("10:00\n曲名 / 歌手\n11:00 次の曲")

        assert len(records) == 2
        assert (records[0].time, records[0].song_title, records[0].artist_name) == (
            600,
            "曲名",
            "歌手",
        )
        assert (records[1].time, records[1].song_title) == (660, "次の曲")

    def test_timestamp_alone_on_last_line(self):
        assert parse_timestamps("1:00 曲\n2:00") == parse_timestamps("1:00 曲")

    def test_timestamp_followed_by_blank_line(self):
        """Test nothing is emitted when the borrowed line is empty."""
        records = parse_timestamps("1:00\n\n2:00 曲")
        assert [(r.time, r.song_title) for r in records] == [(120, "曲")]

    def test_announcement_skipped(self):
        records = parse_timestamps("1:00 曲\n2:00 告知: 新衣装\n3:00 次")
        assert [r.time for r in records] == [60, 180]

    def test_vocals_only_skipped(self):
        records = parse_timestamps("1:00 曲\n2:00 声入り")
        assert [r.time for r in records] == [60]

    def test_zero_dropped_in_comments_only(self):
        text = "0:00 開始\n1:00 曲"
        assert [r.time for r in parse_timestamps(text, source="comment")] == [60]
        assert [r.time for r in parse_timestamps(text, source="description")] == [0, 60]

    def test_emoji_and_prefix_tolerated(self):
        records = parse_timestamps("🎵 2:30 曲 / 歌手")
        assert (records[0].time, records[0].song_title, records[0].artist_name) == (
            150,
            "曲",
            "歌手",
        )

    def test_track_number_stays_in_title(self):
        records = parse_timestamps("0:45 ＃1 春泥棒")
        assert records[0].song_title == "＃1 春泥棒"

    def test_first_match_wins(self):
        records = parse_timestamps("1:00 曲A (2:00 から)")
        assert len(records) == 1
        assert records[0].time == 60
        assert records[0].song_title == "曲A (2:00 から)"

    def test_leading_delimiter_is_title(self):
        """Test an empty side of the delimiter keeps the whole text as title."""
        records = parse_timestamps("1:00 - 歌手")
        assert (records[0].song_title, records[0].artist_name) == ("- 歌手", "")

    def test_crlf_and_indentation(self):
        records = parse_timestamps("  1:00 A  \r\n\t2:00 B\r\n")
        assert [r.song_title for r in records] == ["A", "B"]

    def test_records_are_well_formed(self):
        """Test every record carries a matched timestamp and a title."""
        pattern = re.compile(r"^(\d{1,2}:)?\d{1,2}:\d{1,2}$")
        text = CHAPTER_DESCRIPTION + "\n12:34\n\n5:6 x\nfoo 99:99 bar - baz"
        for record in parse_timestamps(text):
            assert pattern.match(record.original_time)
            assert record.song_title
            assert record.time >= 0
