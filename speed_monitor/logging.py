"""
JSON logging for the speed monitor server.

Every record is one JSON object on stdout; when `log_file` is configured the
same lines also go to a size-rotated file.

Usage:
    from speed_monitor import get_logger
    log = get_logger(__name__)
    log.info("Stored result", extra={"id": 42})
"""
import datetime
import json
import logging
import socket
import sys
import time
from functools import wraps
from logging.handlers import RotatingFileHandler
from typing import Callable, Dict, List, Optional

from .config import Config, get_config

HOSTNAME = socket.gethostname()


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    now = datetime.datetime.now(datetime.timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class JsonFormatter(logging.Formatter):
    """One JSON object per record; `extra_fields` are merged in at top level."""

    def __init__(self, hostname: Optional[str] = None):
        super().__init__()
        self.hostname = hostname or HOSTNAME

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": utc_now_iso(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "function": record.funcName,
            "hostname": self.hostname,
        }
        entry.update(getattr(record, "extra_fields", {}))
        if record.exc_info:
            entry["error"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def build_handlers(config: Config, log_file: Optional[str] = None) -> List[logging.Handler]:
    """stdout always; a RotatingFileHandler only when a log file is configured."""
    handlers: List[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    path = log_file or config.log_file
    if path:
        handlers.append(
            RotatingFileHandler(
                path,
                maxBytes=config.log_max_bytes,
                backupCount=config.log_backup_count,
                encoding="utf-8",
            )
        )
    formatter = JsonFormatter()
    for handler in handlers:
        handler.setFormatter(formatter)
    return handlers


class CustomLogger:
    """
    Thin wrapper over a stdlib logger.

    `extra=` takes a plain dict of fields for the JSON line instead of
    LogRecord attributes.
    """

    def __init__(self, name: str, level: Optional[str] = None, log_file: Optional[str] = None):
        config = get_config()
        self.logger = logging.getLogger(name)
        if not self.logger.handlers:
            for handler in build_handlers(config, log_file):
                self.logger.addHandler(handler)
        level_name = (level or config.log_level).upper()
        self.logger.setLevel(getattr(logging, level_name, logging.INFO))
        self.logger.propagate = False

    def log(self, level: int, msg: str, *args, extra: Optional[Dict] = None, **kwargs):
        if extra:
            kwargs["extra"] = {"extra_fields": extra}
        self.logger.log(level, msg, *args, **kwargs)

    def debug(self, msg: str, *args, **kwargs):
        self.log(logging.DEBUG, msg, *args, **kwargs)

    def info(self, msg: str, *args, **kwargs):
        self.log(logging.INFO, msg, *args, **kwargs)

    def warning(self, msg: str, *args, **kwargs):
        self.log(logging.WARNING, msg, *args, **kwargs)

    def error(self, msg: str, *args, **kwargs):
        self.log(logging.ERROR, msg, *args, **kwargs)

    def exception(self, msg: str, *args, **kwargs):
        self.log(logging.ERROR, msg, *args, exc_info=True, **kwargs)


_loggers: Dict[str, CustomLogger] = {}


def get_logger(name: str) -> CustomLogger:
    """One CustomLogger per module name."""
    if name not in _loggers:
        _loggers[name] = CustomLogger(name)
    return _loggers[name]


def log_execution(func: Callable) -> Callable:
    """Log how long a handler took; failures are logged and re-raised."""
    @wraps(func)
    def wrapper(*args, **kwargs):
        log = get_logger(func.__module__)
        started = time.perf_counter()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log.warning(
                f"{func.__name__} failed: {e}",
                extra={"elapsed_ms": round((time.perf_counter() - started) * 1000, 2)},
            )
            raise
        log.debug(
            f"{func.__name__} done",
            extra={"elapsed_ms": round((time.perf_counter() - started) * 1000, 2)},
        )
        return result
    return wrapper
