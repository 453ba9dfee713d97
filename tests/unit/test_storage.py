"""Unit tests for storage.py (JSON persistence)."""

import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from setlist.config import StorageConfig
from setlist.models import Artist, Song, Video
from setlist.storage import JsonStore, load_excluded_video_ids
from tests.fixtures.test_data import SAMPLE_ARTISTS, SAMPLE_SONGS, SAMPLE_VIDEO


@pytest.fixture
def store(tmp_path):
    return JsonStore(StorageConfig(public_dir=str(tmp_path / "public")))


class TestCatalogFiles:
    """Test cases for songs.json / artists.json."""

    def test_missing_files_are_empty(self, store):
        assert store.load_artists() == []
        assert store.load_songs() == []

    def test_save_format(self, store):
        """Test UTF-8 output with 2-space indent and no escaped kana."""
        store.save_artists([Artist(**a) for a in SAMPLE_ARTISTS])

        raw = store.artists_path.read_text(encoding="utf-8")
        assert "ヨルシカ" in raw
        assert '\n  "artists": [' in raw
        assert not raw.endswith("\n")
        assert json.loads(raw) == {"artists": SAMPLE_ARTISTS}

    def test_absent_optionals_omitted(self, store):
        store.save_songs([Song(song_id="songCCCCCCC", title="曲")])
        data = json.loads(store.songs_path.read_text(encoding="utf-8"))
        assert data == {"songs": [{"song_id": "songCCCCCCC", "title": "曲", "artist_ids": []}]}

    def test_round_trip_is_byte_stable(self, store):
        songs = [Song(**s) for s in SAMPLE_SONGS]
        store.save_songs(songs)
        first = store.songs_path.read_bytes()

        store.save_songs(store.load_songs())
        assert store.songs_path.read_bytes() == first

    @pytest.mark.parametrize("name", ["songs.json", "artists.json"])
    def test_array_top_level_rejected(self, store, name):
        """Test a catalog that is a bare array fails with the file path."""
        store.public_dir.mkdir(parents=True)
        (store.public_dir / name).write_text("[]", encoding="utf-8")

        load = store.load_songs if name == "songs.json" else store.load_artists
        with pytest.raises(ValueError, match=name):
            load()


class TestVideoFiles:
    def test_save_and_load(self, store):
        video = Video.model_validate(SAMPLE_VIDEO)
        path = store.save_video(video)

        assert path == store.videos_dir / "abcdefghijk.json"
        assert store.video_exists("abcdefghijk")
        assert store.load_video("abcdefghijk") == video
        assert json.loads(path.read_text(encoding="utf-8")) == SAMPLE_VIDEO

    def test_curated_timestamp_description_kept(self, store):
        """Test a hand-written timestamp note loads and saves back unchanged."""
        data = {
            **SAMPLE_VIDEO,
            "timestamps": [{**SAMPLE_VIDEO["timestamps"][0], "description": "メドレー"}],
        }
        store.videos_dir.mkdir(parents=True)
        path = store.video_path("abcdefghijk")
        path.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
        original = path.read_bytes()

        video = store.load_video("abcdefghijk")
        assert video.timestamps[0].description == "メドレー"

        store.save_video(video)
        assert path.read_bytes() == original

    def test_list_and_delete(self, store):
        for video_id in ("bbbbbbbbbbb", "aaaaaaaaaaa"):
            store.save_video(Video.model_validate({**SAMPLE_VIDEO, "video_id": video_id}))

        assert store.list_video_ids() == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert store.delete_video("aaaaaaaaaaa")
        assert not store.delete_video("aaaaaaaaaaa")
        assert store.list_video_ids() == ["bbbbbbbbbbb"]

    def test_list_without_directory(self, store):
        assert store.list_video_ids() == []


class TestVideosList:
    def test_generate(self, store):
        store.save_video(Video.model_validate(SAMPLE_VIDEO))

        videos_list = store.generate_videos_list("UC123")
        data = json.loads(store.videos_list_path.read_text(encoding="utf-8"))

        assert data["videos"] == ["abcdefghijk"]
        assert data["channel_id"] == "UC123"
        assert data["generated_at"].endswith("Z")
        assert videos_list.videos == ["abcdefghijk"]

    def test_unknown_channel(self, store):
        assert store.generate_videos_list(None).channel_id == "unknown"


class TestExcludedIds:
    """Test cases for the exclusion list."""

    def test_missing_file(self, tmp_path):
        assert load_excluded_video_ids(str(tmp_path / "missing.json")) == set()

    def test_empty_file(self, tmp_path):
        path = tmp_path / "excluded.json"
        path.write_text("  \n", encoding="utf-8")
        assert load_excluded_video_ids(str(path)) == set()

    def test_valid_list(self, tmp_path):
        path = tmp_path / "excluded.json"
        path.write_text('[" abc ", "", 3, "def"]', encoding="utf-8")
        assert load_excluded_video_ids(str(path)) == {"abc", "def"}

    @pytest.mark.parametrize("content", ["{not json", '{"ids": []}'])
    def test_invalid_content(self, tmp_path, content):
        path = tmp_path / "excluded.json"
        path.write_text(content, encoding="utf-8")
        assert load_excluded_video_ids(str(path)) == set()


class TestDestroy:
    """Test cases for wiping generated data."""

    @pytest.fixture
    def populated(self, store):
        store.save_video(Video.model_validate(SAMPLE_VIDEO))
        store.save_songs([Song(**s) for s in SAMPLE_SONGS])
        store.save_artists([Artist(**a) for a in SAMPLE_ARTISTS])
        store.generate_videos_list("UC_current")
        return store

    def test_same_channel_is_kept(self, populated):
        assert populated.destroy("UC_current") is None
        assert populated.songs_path.exists()
        assert populated.video_exists("abcdefghijk")

    def test_force(self, populated):
        assert populated.destroy("UC_current", force=True) == 4
        assert not populated.songs_path.exists()
        assert not populated.artists_path.exists()
        assert not populated.videos_list_path.exists()
        assert populated.list_video_ids() == []

    def test_other_channel(self, populated):
        assert populated.destroy("UC_other") == 4

    def test_nothing_stored(self, store):
        assert store.destroy("UC_current") == 0
