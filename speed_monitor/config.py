"""
Centralized configuration management.

Provides a single source of truth for all configuration values.
Supports: config.json → environment variables → defaults (priority order).

Usage:
    from speed_monitor import get_config
    config = get_config()
    db_path = config.db_path
    port = config.port
"""
import json
import os
from dataclasses import dataclass, fields
from functools import lru_cache
from pathlib import Path
from typing import Optional

from .constants import DEFAULT_DB_PATH, DEFAULT_PORT, DEFAULT_TIMEZONE, STATS_WINDOW_HOURS


# Find config.json relative to project root
def _find_config_path() -> Path:
    """Find config.json in project root."""
    candidates = [
        Path(__file__).parent.parent / "config.json",  # speed_monitor/../config.json
        Path.cwd() / "config.json",  # current directory
    ]
    for path in candidates:
        if path.exists():
            return path
    return candidates[0]


@dataclass
class Config:
    """
    Centralized configuration with type hints.

    All values can be overridden via environment variables.
    Environment variable names are uppercase with underscores.
    Example: db_path → DB_PATH
    """

    # Server
    port: int = DEFAULT_PORT

    # Storage
    db_path: str = DEFAULT_DB_PATH

    # Timezone used to bucket hourly stats
    timezone: str = DEFAULT_TIMEZONE
    stats_window_hours: int = STATS_WINDOW_HOURS

    # Logging
    log_level: str = "INFO"
    log_file: str = ""  # empty disables the rotating file handler
    log_max_bytes: int = 10485760  # 10MB
    log_backup_count: int = 5

    @classmethod
    def from_file(cls, config_path: Optional[Path] = None) -> "Config":
        """
        Load config from JSON file with environment variable overrides.

        Priority: environment variables > config.json > defaults
        """
        if config_path is None:
            config_path = _find_config_path()

        config_dict = {}

        if config_path.exists():
            try:
                with open(config_path, "r", encoding="utf-8") as f:
                    config_dict = json.load(f)
            except (json.JSONDecodeError, IOError):
                pass  # Use defaults if file is invalid

        env_overrides = {
            "port": os.environ.get("PORT"),
            "db_path": os.environ.get("DB_PATH"),
            "log_level": os.environ.get("LOG_LEVEL"),
            "log_file": os.environ.get("LOG_FILE"),
            "timezone": os.environ.get("TIMEZONE") or os.environ.get("TZ"),
        }

        for key, value in env_overrides.items():
            if value is not None:
                config_dict[key] = value

        known = {f.name: f.type for f in fields(cls)}
        values = {}
        for key, value in config_dict.items():
            if key not in known:
                continue
            if known[key] in (int, "int"):
                try:
                    value = int(value)
                except (TypeError, ValueError):
                    continue
            values[key] = value
        return cls(**values)


@lru_cache(maxsize=1)
def get_config() -> Config:
    """
    Get the singleton Config instance.

    Cached for performance - config is loaded once per process.
    """
    return Config.from_file()

