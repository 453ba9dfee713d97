"""Configuration models using simple dataclasses."""

import logging
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Type
from urllib.parse import urlparse

import yaml

logger = logging.getLogger(__name__)


@dataclass
class StorageConfig:
    """Where the generated JSON collections live."""

    public_dir: str = "public"
    excluded_ids_path: str = "config/excludedVideoIds.json"


@dataclass
class YouTubeConfig:
    """YouTube Data API settings."""

    api_key_env: str = "YOUTUBE_API_KEY"
    channel_id: str = ""  # falls back to $YOUTUBE_CHANNEL_ID
    base_url: str = "https://www.googleapis.com/youtube/v3"
    timeout_seconds: int = 30

    max_comment_pages: int = 5
    comments_per_page: int = 100
    title_keyword: str = "歌枠"

    # Pause between videos and between playlist pages
    request_delay_seconds: float = 2.0

    def resolve_channel_id(self) -> str:
        return self.channel_id or os.environ.get("YOUTUBE_CHANNEL_ID", "")


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "INFO"
    file_path: str = "setlist_collector.log"
    max_file_size_mb: int = 50
    backup_count: int = 5
    console_output: bool = True


@dataclass
class UIConfig:
    """User interface configuration."""

    show_progress_bar: bool = True


@dataclass
class CollectorConfig:
    """Main configuration model."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    youtube: YouTubeConfig = field(default_factory=YouTubeConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    ui: UIConfig = field(default_factory=UIConfig)

    dry_run: bool = False


def _filter_fields(data: Dict[str, Any], cls: Type[Any]) -> Dict[str, Any]:
    """Return only keys present on the dataclass to avoid TypeErrors."""
    valid_fields = cls.__dataclass_fields__.keys()
    return {k: v for k, v in data.items() if k in valid_fields}


def validate_config(cfg: CollectorConfig) -> None:
    """Validation with bounds checking."""
    if not (1 <= cfg.youtube.timeout_seconds <= 600):
        raise ValueError("youtube.timeout_seconds must be between 1 and 600")
    if not (1 <= cfg.youtube.max_comment_pages <= 20):
        raise ValueError("youtube.max_comment_pages must be between 1 and 20")
    if not (1 <= cfg.youtube.comments_per_page <= 100):
        raise ValueError("youtube.comments_per_page must be between 1 and 100")
    if not (0 <= cfg.youtube.request_delay_seconds <= 60):
        raise ValueError("youtube.request_delay_seconds must be between 0 and 60")
    if not cfg.youtube.api_key_env:
        raise ValueError("youtube.api_key_env must name an environment variable")

    parsed = urlparse(cfg.youtube.base_url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError("youtube.base_url must be a valid HTTP/HTTPS URL")

    # Logging validation
    if not (1 <= cfg.logging.max_file_size_mb <= 1000):  # 1MB to 1GB
        raise ValueError("max_file_size_mb must be between 1 and 1000 MB")
    if not (0 <= cfg.logging.backup_count <= 100):
        raise ValueError("backup_count must be between 0 and 100")

    valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
    if cfg.logging.level.upper() not in valid_levels:
        raise ValueError(f"logging.level must be one of: {valid_levels}")

    if not cfg.storage.public_dir:
        raise ValueError("storage.public_dir must not be empty")


def load_config(config_path: Optional[str] = None) -> CollectorConfig:
    """Load configuration from YAML file or return defaults."""
    if config_path and Path(config_path).exists():
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                config_data = yaml.safe_load(f)

            if config_data is None:
                logger.warning(f"Configuration file {config_path} is empty, using defaults")
                config_data = {}
            elif not isinstance(config_data, dict):
                raise ValueError(
                    f"Configuration file must contain a dictionary, got {type(config_data).__name__}"
                )

        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in configuration file {config_path}: {e}")
        except (IOError, OSError) as e:
            raise ValueError(f"Cannot read configuration file {config_path}: {e}")

        try:
            cfg = CollectorConfig(
                storage=StorageConfig(
                    **_filter_fields(config_data.get("storage") or {}, StorageConfig)
                ),
                youtube=YouTubeConfig(
                    **_filter_fields(config_data.get("youtube") or {}, YouTubeConfig)
                ),
                logging=LoggingConfig(
                    **_filter_fields(config_data.get("logging") or {}, LoggingConfig)
                ),
                ui=UIConfig(**_filter_fields(config_data.get("ui") or {}, UIConfig)),
                dry_run=config_data.get("dry_run", False),
            )
        except (TypeError, ValueError) as e:
            raise ValueError(f"Invalid configuration values in {config_path}: {e}")

        validate_config(cfg)
        return cfg
    cfg = CollectorConfig()
    validate_config(cfg)
    return cfg


def save_config_template(output_path: str = "config_template.yaml"):
    """Save a template configuration file."""
    config = CollectorConfig()
    config_dict = asdict(config)

    with open(output_path, "w", encoding="utf-8") as f:
        yaml.dump(config_dict, f, default_flow_style=False, indent=2, allow_unicode=True)

    print(f"Configuration template saved to: {output_path}")
