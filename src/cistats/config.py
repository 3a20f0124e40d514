"""Configuration management for CI Stats Sync."""

import json
import logging
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Optional

from platformdirs import user_config_dir, user_data_dir, user_log_dir

__all__ = [
    "Config",
    "SyncSettings",
    "GeneratorSettings",
    "GitHubSettings",
    "setup_logging",
    "DEFAULT_GITHUB_API_URL",
    "DEFAULT_MAX_WINDOW_HOURS",
]

logger = logging.getLogger(__name__)

APP_NAME = "CI Stats Sync"
APP_AUTHOR = "CIStats"

# GitHub defaults
DEFAULT_GITHUB_API_URL = "https://api.github.com"
DEFAULT_GITHUB_TIMEOUT = 10  # seconds

# Sync settings
DEFAULT_SYNC_INTERVAL = 3600  # seconds
DEFAULT_MAX_WINDOW_HOURS = 24 * 7  # one week
DEFAULT_INITIAL_BACKFILL_DAYS = 28
MIN_SYNC_INTERVAL = 60


@dataclass
class SyncSettings:
    """Historical stats sync configuration."""

    interval_seconds: int = DEFAULT_SYNC_INTERVAL
    max_window_hours: int = DEFAULT_MAX_WINDOW_HOURS
    initial_backfill_days: int = DEFAULT_INITIAL_BACKFILL_DAYS
    projects: list[str] = field(default_factory=list)


@dataclass
class GeneratorSettings:
    """Generator tables as stage-scoped name -> "module:function" paths."""

    hourly: dict[str, str] = field(default_factory=dict)
    daily: dict[str, str] = field(default_factory=dict)


@dataclass
class GitHubSettings:
    """Upstream source-control API settings."""

    api_url: str = DEFAULT_GITHUB_API_URL
    timeout: int = DEFAULT_GITHUB_TIMEOUT
    oauth_token: Optional[str] = None  # falls back to the system keyring


@dataclass
class Config:
    """Top-level settings for the stats sync."""

    database_path: Optional[str] = None
    sync: SyncSettings = field(default_factory=SyncSettings)
    generators: GeneratorSettings = field(default_factory=GeneratorSettings)
    github: GitHubSettings = field(default_factory=GitHubSettings)
    debug_mode: bool = False

    @classmethod
    def get_config_dir(cls) -> Path:
        """Per-user configuration directory."""
        return Path(user_config_dir(APP_NAME, APP_AUTHOR))

    @classmethod
    def get_data_dir(cls) -> Path:
        """Get the data directory path (for the SQLite stores)."""
        return Path(user_data_dir(APP_NAME, APP_AUTHOR))

    @classmethod
    def get_log_dir(cls) -> Path:
        """Directory for cistats.log."""
        return Path(user_log_dir(APP_NAME, APP_AUTHOR))

    @classmethod
    def get_config_file(cls) -> Path:
        """Default location of config.json."""
        return cls.get_config_dir() / "config.json"

    @classmethod
    def load(cls, path: Optional[Path] = None) -> "Config":
        """Load config.json, falling back to defaults if it is missing or unreadable."""
        config_file = path or cls.get_config_file()
        if config_file.exists():
            try:
                with open(config_file, "r") as f:
                    data = json.load(f)
                return cls._from_dict(data)
            except Exception as e:
                logger.warning(f"Failed to load config from {config_file}: {e}, using defaults")
        return cls()

    @classmethod
    def _from_dict(cls, data: dict) -> "Config":
        """Build a Config from parsed JSON, ignoring unknown keys."""
        sync_data = data.pop("sync", {})
        generator_data = data.pop("generators", {})
        github_data = data.pop("github", {})

        sync = SyncSettings(**sync_data) if sync_data else SyncSettings()
        sync.interval_seconds = max(MIN_SYNC_INTERVAL, sync.interval_seconds)

        return cls(
            sync=sync,
            generators=GeneratorSettings(**generator_data) if generator_data else GeneratorSettings(),
            github=GitHubSettings(**github_data) if github_data else GitHubSettings(),
            **{k: v for k, v in data.items() if k in cls.__dataclass_fields__},
        )

    @property
    def db_path(self) -> Path:
        """Resolved SQLite database path."""
        if self.database_path:
            return Path(self.database_path).expanduser()
        return self.get_data_dir() / "cistats.db"

    def save(self, path: Optional[Path] = None) -> None:
        """Write config.json without secrets."""
        config_file = path or self.get_config_file()
        config_file.parent.mkdir(parents=True, exist_ok=True)

        data = asdict(self)
        # Never write the token to disk; it belongs in the keyring
        data["github"].pop("oauth_token", None)
        with open(config_file, "w") as f:
            json.dump(data, f, indent=2)
        logger.info(f"Config saved to {config_file}")


def setup_logging(debug: bool = False) -> None:
    """Log to the platform log dir and to stderr."""
    log_dir = Config.get_log_dir()
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "cistats.log"

    level = logging.DEBUG if debug else logging.INFO
    format_str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.FileHandler(log_file),
            logging.StreamHandler(),
        ],
    )

    # Reduce noise from libraries
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("requests").setLevel(logging.WARNING)
    logging.getLogger("apscheduler").setLevel(logging.WARNING)
