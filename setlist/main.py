"""Main collector orchestration."""

import asyncio
import logging
import time
from dataclasses import dataclass, field
from typing import Iterable, List, Optional

from tqdm import tqdm

from .config import CollectorConfig
from .processor import ProcessingResult, VideoProcessor
from .storage import JsonStore
from .youtube import YouTubeClient

logger = logging.getLogger(__name__)


@dataclass
class BatchSummary:
    """Per-video outcomes of one batch run."""

    successful: List[ProcessingResult] = field(default_factory=list)
    failed: List[ProcessingResult] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.successful) + len(self.failed)


class SetlistCollector:
    """Runs the video processor over batches of videos from a channel."""

    def __init__(
        self,
        config: CollectorConfig,
        client: Optional[YouTubeClient] = None,
        store: Optional[JsonStore] = None,
    ):
        self.config = config
        self.store = store or JsonStore(config.storage)
        self.client = client or YouTubeClient(config.youtube)
        self.video_processor = VideoProcessor(config, self.client, self.store)
        self.excluded_ids = self.store.load_excluded_video_ids()

    async def process_video(
        self, video_id: str, force_user_comments: bool = False
    ) -> ProcessingResult:
        """Process one video, turning any failure into a failed result."""
        try:
            return await self.video_processor.process_video(video_id, force_user_comments)
        except Exception as e:
            logger.error(f"Error processing video {video_id}: {e}")
            return ProcessingResult(video_id=video_id, errors=[str(e)])

    async def process_videos(
        self, video_ids: Iterable[str], force_user_comments: bool = False
    ) -> BatchSummary:
        """Process videos one after another with a pause between them."""
        summary = BatchSummary()
        queue = []
        for video_id in video_ids:
            if video_id in self.excluded_ids:
                logger.info(f"Skipping excluded video: {video_id}")
                summary.skipped.append(video_id)
            else:
                queue.append(video_id)

        start_time = time.time()
        show_progress = self.config.ui.show_progress_bar and len(queue) > 1
        delay = self.config.youtube.request_delay_seconds

        for index, video_id in enumerate(
            tqdm(queue, desc="Processing videos", unit="video", disable=not show_progress)
        ):
            result = await self.process_video(video_id, force_user_comments)
            if result.is_success:
                summary.successful.append(result)
            else:
                summary.failed.append(result)

            if index < len(queue) - 1 and delay > 0:
                await asyncio.sleep(delay)

        logger.info(
            f"Finished processing videos in {time.time() - start_time:.1f}s. "
            f"Success: {len(summary.successful)}, Failed: {len(summary.failed)}, "
            f"Skipped: {len(summary.skipped)}"
        )
        for result in summary.failed:
            logger.warning(f"  - {result.video_id}: {'; '.join(result.errors)}")
        return summary

    async def prune_unavailable(self, known_ids: Iterable[str]) -> List[str]:
        """Delete stored videos that went private or were removed.

        Ids in ``known_ids`` were just returned by the API and are skipped.
        """
        known = set(known_ids)
        stored = [video_id for video_id in self.store.list_video_ids() if video_id not in known]
        logger.info(f"Checking {len(stored)} stored videos for availability")

        removed = []
        for video_id in stored:
            if await self.client.is_video_available(video_id):
                continue
            logger.info(f"Video no longer available: {video_id}")
            if not self.config.dry_run:
                self.store.delete_video(video_id)
            removed.append(video_id)
        return removed

    async def collect_new_videos(self, channel_id: str) -> BatchSummary:
        """Ingest the channel's recent streams that have no file yet."""
        video_ids = await self.client.fetch_recent_streams(channel_id)
        new_ids = [video_id for video_id in video_ids if not self.store.video_exists(video_id)]
        logger.info(f"Found {len(new_ids)} new videos out of {len(video_ids)}")

        summary = await self.process_videos(new_ids)
        await self.prune_unavailable(video_ids)

        if not self.config.dry_run:
            self.store.generate_videos_list(channel_id)
        return summary

    async def backfill_channel(
        self, channel_id: str, batch_size: int = 0, batch_start: int = 0
    ) -> BatchSummary:
        """Ingest every past stream of the channel, newest first.

        With ``batch_size`` > 0 only ``batch_size`` unseen streams starting at
        ``batch_start`` are processed, so a long history can be split over runs.
        """
        streams = await self.client.fetch_all_streams(channel_id)
        streams.sort(key=lambda stream: stream.published_at, reverse=True)

        pending = [stream for stream in streams if not self.store.video_exists(stream.video_id)]
        logger.info(f"Found {len(pending)} new karaoke streams to process")

        if batch_size > 0:
            pending = pending[batch_start : batch_start + batch_size]
            logger.info(
                f"Processing batch {batch_start} to {batch_start + len(pending) - 1} "
                f"({len(pending)} videos)"
            )

        summary = await self.process_videos(stream.video_id for stream in pending)

        if summary.successful and not self.config.dry_run:
            self.store.generate_videos_list(channel_id)
        return summary

    async def close(self):
        """Cleanup resources."""
        try:
            await self.client.close()
            logger.info("Cleanup completed")
        except Exception as e:
            logger.error(f"Cleanup error: {e}")
