"""Command-line interface for the setlist collector."""

import asyncio
import logging
import os
import sys
from typing import Optional

import click
from dotenv import load_dotenv

from setlist.config import CollectorConfig, load_config, save_config_template
from setlist.main import BatchSummary, SetlistCollector
from setlist.maintenance import (
    link_song_artist,
    link_song_artist_list,
    merge_duplicate_songs,
    parse_link_argument,
    validate_files,
)
from setlist.storage import JsonStore
from setlist.utils import setup_logging

config_option = click.option(
    "--config", "-c", type=click.Path(exists=True), help="Path to configuration file"
)
verbose_option = click.option("--verbose", "-v", is_flag=True, help="Verbose logging")


def _prepare(config: Optional[str], verbose: bool) -> CollectorConfig:
    """Load configuration and set up logging for a command."""
    collector_config = load_config(config) if config else CollectorConfig()
    log_cfg = collector_config.logging
    level = logging.DEBUG if verbose else getattr(logging, log_cfg.level.upper())
    setup_logging(
        level=level,
        log_file=log_cfg.file_path,
        max_bytes=log_cfg.max_file_size_mb * 1024 * 1024,
        backup_count=log_cfg.backup_count,
        console_output=log_cfg.console_output,
    )
    return collector_config


def _require_channel_id(collector_config: CollectorConfig, channel_id: Optional[str]) -> str:
    channel_id = channel_id or collector_config.youtube.resolve_channel_id()
    if not channel_id:
        logging.error("No channel ID given and YOUTUBE_CHANNEL_ID is not set")
        sys.exit(1)
    return channel_id


def _print_summary(title: str, summary: BatchSummary) -> None:
    print("\n" + "=" * 50)
    print(title)
    print("=" * 50)
    print(f"Videos processed: {summary.total}")
    print(f"Successful: {len(summary.successful)}")
    print(f"Failed: {len(summary.failed)}")
    if summary.skipped:
        print(f"Skipped (excluded): {len(summary.skipped)}")
    new_songs = sum(result.new_songs for result in summary.successful)
    new_artists = sum(result.new_artists for result in summary.successful)
    print(f"New songs: {new_songs}")
    print(f"New artists: {new_artists}")


async def _update_async(
    collector: SetlistCollector, video_id: str, user_comment: bool, channel_id: str
) -> bool:
    """Helper to ingest a single video and refresh the videos list."""
    try:
        result = await collector.process_video(video_id, force_user_comments=user_comment)
        if not result.is_success:
            return False

        if not collector.config.dry_run:
            collector.store.generate_videos_list(channel_id)

        print("\n" + "=" * 50)
        print("VIDEO UPDATE RESULTS")
        print("=" * 50)
        print(f"Video: {result.video.title} ({video_id})")
        print(f"Timestamp source: {result.branch}")
        print(f"Timestamps: {len(result.video.timestamps)}")
        print(f"New songs: {result.new_songs}")
        print(f"New artists: {result.new_artists}")
        return True
    finally:
        await collector.close()


async def _fetch_new_async(collector: SetlistCollector, channel_id: str) -> None:
    """Helper to collect recent streams and print statistics."""
    try:
        summary = await collector.collect_new_videos(channel_id)
        _print_summary("NEW VIDEO RESULTS", summary)
    finally:
        await collector.close()


async def _backfill_async(
    collector: SetlistCollector, channel_id: str, batch_size: int, batch_start: int
) -> None:
    """Helper to backfill a channel and print statistics."""
    try:
        summary = await collector.backfill_channel(channel_id, batch_size, batch_start)
        _print_summary("BACKFILL RESULTS", summary)
    finally:
        await collector.close()


@click.group()
@click.version_option("1.0.0")
def cli():
    """Karaoke Setlist Collector - Extract song timestamps from YouTube karaoke streams."""
    load_dotenv()


@cli.command()
@click.argument("video_id")
@click.option(
    "--user-comment",
    is_flag=True,
    help="Use timestamps from comments even if the description has them",
)
@click.option("--dry-run", is_flag=True, help="Dry run mode (no file writes)")
@config_option
@verbose_option
def update(video_id, user_comment, dry_run, config, verbose):
    """Ingest (or re-ingest) a single video."""
    collector_config = _prepare(config, verbose)
    if dry_run:
        collector_config.dry_run = True

    try:
        collector = SetlistCollector(collector_config)
        channel_id = collector_config.youtube.resolve_channel_id()
        ok = asyncio.run(_update_async(collector, video_id, user_comment, channel_id))
    except KeyboardInterrupt:
        logging.info("Update interrupted by user")
        return
    except Exception as e:
        logging.error(f"Update failed: {e}")
        sys.exit(1)

    if not ok:
        sys.exit(1)


@cli.command(name="fetch-new")
@click.argument("channel_id", required=False)
@click.option("--dry-run", is_flag=True, help="Dry run mode (no file writes)")
@config_option
@verbose_option
def fetch_new(channel_id, dry_run, config, verbose):
    """Ingest the channel's newest karaoke streams and prune unavailable ones."""
    collector_config = _prepare(config, verbose)
    if dry_run:
        collector_config.dry_run = True
    channel_id = _require_channel_id(collector_config, channel_id)

    try:
        collector = SetlistCollector(collector_config)
        asyncio.run(_fetch_new_async(collector, channel_id))
    except KeyboardInterrupt:
        logging.info("Collection interrupted by user")
    except Exception as e:
        logging.error(f"Collection failed: {e}")
        sys.exit(1)


@cli.command()
@click.argument("channel_id", required=False)
@click.option("--batch-size", type=int, default=0, help="Process at most N unseen streams")
@click.option("--batch-start", type=int, default=0, help="Index of the first unseen stream")
@click.option("--dry-run", is_flag=True, help="Dry run mode (no file writes)")
@config_option
@verbose_option
def backfill(channel_id, batch_size, batch_start, dry_run, config, verbose):
    """Ingest every past karaoke stream of the channel, newest first."""
    collector_config = _prepare(config, verbose)
    if dry_run:
        collector_config.dry_run = True
    channel_id = _require_channel_id(collector_config, channel_id)

    try:
        collector = SetlistCollector(collector_config)
        print(f"Starting backfill for channel: {channel_id}")
        if batch_size:
            print(f"Batch window: {batch_start} to {batch_start + batch_size - 1}")
        asyncio.run(_backfill_async(collector, channel_id, batch_size, batch_start))
    except KeyboardInterrupt:
        logging.info("Backfill interrupted by user")
    except Exception as e:
        logging.error(f"Backfill failed: {e}")
        sys.exit(1)


@cli.command(name="generate-list")
@config_option
@verbose_option
def generate_list(config, verbose):
    """Rewrite api/videos-list.json from the stored video files."""
    collector_config = _prepare(config, verbose)
    store = JsonStore(collector_config.storage)
    videos_list = store.generate_videos_list(collector_config.youtube.resolve_channel_id())
    print(f"Generated videos list with {len(videos_list.videos)} videos")


@cli.command()
@click.argument("files", nargs=-1, type=click.Path())
@config_option
@verbose_option
def validate(files, config, verbose):
    """Validate the generated JSON files (all of them when none are given)."""
    collector_config = _prepare(config, verbose)
    report = validate_files(JsonStore(collector_config.storage), files or None)

    print("\n" + "=" * 50)
    print("JSON VALIDATION RESULTS")
    print("=" * 50)
    print(f"Valid files: {len(report.valid)}")
    print(f"Invalid files: {len(report.invalid)}")
    for path in report.invalid:
        print(f"  ✗ {path}")
        for message in report.errors[path]:
            print(f"    - {message}")

    if not report.all_valid:
        sys.exit(1)


@cli.command()
@click.option("--force", is_flag=True, help="Delete even if the stored data is for this channel")
@config_option
@verbose_option
def destroy(force, config, verbose):
    """Delete all generated data before switching to another channel."""
    collector_config = _prepare(config, verbose)
    channel_id = collector_config.youtube.resolve_channel_id()
    if not channel_id:
        logging.error("YOUTUBE_CHANNEL_ID is not set")
        sys.exit(1)

    try:
        deleted = JsonStore(collector_config.storage).destroy(channel_id, force=force)
    except OSError as e:
        logging.error(f"Error deleting files: {e}")
        sys.exit(1)

    if deleted is None:
        print("Current channel ID matches stored channel ID. No files were deleted.")
        print("Use --force to delete files anyway.")
    else:
        print(f"Deleted {deleted} files")


@cli.command()
@click.option("--song", "-s", required=True, help="Song title, or a JSON artist-to-songs mapping")
@click.option("--artist", "-a", help="Artist name (required with a plain song title)")
@config_option
@verbose_option
def link(song, artist, config, verbose):
    """Link songs to an artist, creating the missing records."""
    collector_config = _prepare(config, verbose)
    store = JsonStore(collector_config.storage)
    songs = store.load_songs()
    artists = store.load_artists()

    mapping = parse_link_argument(song)
    if mapping is not None:
        changed = link_song_artist_list(mapping, songs, artists) > 0
    elif artist:
        changed = link_song_artist(song, artist, songs, artists)
    else:
        logging.error("When using --song with a song title, --artist is required")
        sys.exit(1)

    if changed:
        store.save_songs(songs)
        store.save_artists(artists)
        print("Songs and artists updated")
    else:
        print("No changes needed")


@cli.command(name="merge-duplicates")
@click.option("--artist-id", required=True, help="Artist whose duplicate records get merged away")
@click.option("--dry-run", "-d", is_flag=True, help="Only report what would change")
@config_option
@verbose_option
def merge_duplicates(artist_id, dry_run, config, verbose):
    """Merge same-title songs split between an artist-tagged and an untagged record."""
    collector_config = _prepare(config, verbose)
    store = JsonStore(collector_config.storage)
    songs = store.load_songs()
    videos = [store.load_video(video_id) for video_id in store.list_video_ids()]

    report = merge_duplicate_songs(songs, videos, artist_id, dry_run=dry_run)

    print("\n" + "=" * 50)
    print("DUPLICATE MERGE" + (" (DRY RUN)" if dry_run else ""))
    print("=" * 50)
    print(f"Duplicate titles: {len(report.duplicate_titles)}")
    print(f"Merge pairs: {len(report.replacements)}")
    for old_id, new_id in report.replacements.items():
        print(f"  {old_id} -> {new_id}")
    print(f"Affected videos: {len(report.affected_videos)}")
    print(f"References: {report.references}")

    if dry_run or not report.replacements:
        return

    store.save_songs(songs)
    for video in videos:
        if video.video_id in report.affected_videos:
            store.save_video(video)


@cli.command(name="create-config")
@click.option("--output", "-o", default="config_template.yaml", help="Output path for template")
def create_config(output):
    """Create a configuration file template."""
    save_config_template(output)


@cli.command(name="check-env")
@config_option
def check_env(config):
    """Show whether the required environment is in place."""
    try:
        collector_config = load_config(config) if config else CollectorConfig()
    except ValueError as e:
        print(f"Configuration error: {e}")
        sys.exit(1)

    youtube = collector_config.youtube
    api_key_set = bool(os.environ.get(youtube.api_key_env))
    channel_id = youtube.resolve_channel_id()

    print(f"{youtube.api_key_env}: {'set' if api_key_set else 'NOT SET'}")
    print(f"Channel ID: {channel_id or 'NOT SET'}")
    print(f"Public directory: {collector_config.storage.public_dir}")

    if not api_key_set:
        sys.exit(1)


if __name__ == "__main__":
    cli()
