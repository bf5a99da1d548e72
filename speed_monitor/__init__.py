"""
Speed Monitor ingestion and reporting service.

This package provides:
- Configuration management
- Logging setup
- SQLite storage for submitted results
- Ingestion and query handlers used by the HTTP front (app.py)
"""

from .config import Config, get_config
from .logging import get_logger, CustomLogger
from .errors import SpeedMonitorError, ValidationError, StorageError
from .storage import SpeedResultStore
from .ingest import submit
from .queries import list_results, list_for_user, get_stats

__version__ = "1.0.0"

__all__ = [
    # Config
    "Config",
    "get_config",
    # Logging
    "get_logger",
    "CustomLogger",
    # Errors
    "SpeedMonitorError",
    "ValidationError",
    "StorageError",
    # Storage
    "SpeedResultStore",
    # Handlers
    "submit",
    "list_results",
    "list_for_user",
    "get_stats",
]
