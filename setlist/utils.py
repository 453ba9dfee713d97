"""Utilities and helper functions."""

import logging
import re
import sys
import unicodedata
from logging.handlers import RotatingFileHandler

from .errors import InvalidFormat


def setup_logging(
    level: int = logging.INFO,
    log_file: str = "setlist_collector.log",
    max_bytes: int = 50 * 1024 * 1024,
    backup_count: int = 5,
    console_output: bool = True,
) -> None:
    """Setup comprehensive logging configuration.

    Parameters
    ----------
    level: int
        Logging level.
    log_file: str
        Path to the log file.
    max_bytes: int
        Maximum size in bytes before rotating the log file.
    backup_count: int
        Number of rotated log files to keep.
    console_output: bool
        Whether to also log to the console.
    """

    formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.setLevel(level)

    file_handler = RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    if console_output:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Suppress noisy third-party loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def parse_duration(duration_str: str) -> int:
    """Parse an ``H:MM:SS`` / ``M:SS`` timestamp into seconds.

    Components are combined positionally without range checks, so ``"1:75"``
    yields 135. Anything other than two or three integer components raises
    :class:`InvalidFormat`.
    """
    parts = duration_str.split(":") if duration_str else []
    if len(parts) not in (2, 3):
        raise InvalidFormat(f"Invalid time format: {duration_str!r}")

    try:
        values = [int(part) for part in parts]
    except ValueError:
        raise InvalidFormat(f"Invalid time format: {duration_str!r}")

    if len(values) == 3:  # H:MM:SS
        return values[0] * 3600 + values[1] * 60 + values[2]
    return values[0] * 60 + values[1]  # M:SS


def format_duration(seconds: int) -> str:
    """Format seconds into a human-readable string (HH:MM:SS)."""
    if seconds < 0:
        return "00:00"
    hours, remainder = divmod(seconds, 3600)
    minutes, seconds = divmod(remainder, 60)
    if hours > 0:
        return f"{hours:02}:{minutes:02}:{seconds:02}"
    else:
        return f"{minutes:02}:{seconds:02}"


def normalize_text(text: str) -> str:
    """Equality key for artist names and song titles: NFC, then lowercase."""
    return unicodedata.normalize("NFC", text).lower()


_TAG_PATTERN = re.compile(r"<[^>]*>")


def strip_html(html: str) -> str:
    """Turn a comment's ``textDisplay`` markup into plain text.

    Tags become newlines so ``<br>``-separated setlist lines stay on their own
    lines. Only the three entities YouTube emits for setlists are decoded.
    """
    text = _TAG_PATTERN.sub("\n", html)
    return text.replace("&lt;", "<").replace("&gt;", ">").replace("&amp;", "&")
