"""
Karaoke Setlist Collector

Extracts song timestamps from YouTube karaoke live streams and maintains
deduplicated song and artist catalogs as static JSON files.
"""

__version__ = "1.0.0"
__author__ = "Setlist Collector Team"

from .config import CollectorConfig
from .main import SetlistCollector
from .processor import VideoProcessor

__all__ = ["CollectorConfig", "SetlistCollector", "VideoProcessor"]
