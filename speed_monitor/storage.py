"""
SQLite-backed storage for speed test results.

Provides:
- Idempotent schema creation (table + user_id/timestamp indexes)
- Single-row insert returning the assigned id
- Read-only parameterized queries returning plain dicts

One connection is shared across request threads; every statement runs under
a lock so writers are serialized. Pass ":memory:" for a throwaway store.

Usage:
    from speed_monitor.storage import SpeedResultStore
    store = SpeedResultStore("./speed_monitor.db")
    store.init_schema()
    new_id = store.insert(record.as_row())
"""
import sqlite3
from threading import Lock
from typing import Any, Dict, List, Optional, Sequence

from .constants import TABLE_NAME
from .logging import get_logger

log = get_logger(__name__)

SCHEMA = f"""
CREATE TABLE IF NOT EXISTS {TABLE_NAME} (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    hostname TEXT,
    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
    download_mbps REAL,
    upload_mbps REAL,
    ping_ms REAL,
    network_ssid TEXT,
    external_ip TEXT,
    status TEXT,
    created_at DATETIME DEFAULT CURRENT_TIMESTAMP
);

CREATE INDEX IF NOT EXISTS idx_user_id ON {TABLE_NAME}(user_id);
CREATE INDEX IF NOT EXISTS idx_timestamp ON {TABLE_NAME}(timestamp);
"""

COLUMNS = (
    "user_id",
    "hostname",
    "timestamp",
    "download_mbps",
    "upload_mbps",
    "ping_ms",
    "network_ssid",
    "external_ip",
    "status",
)

INSERT_SQL = (
    f"INSERT INTO {TABLE_NAME} ({', '.join(COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in COLUMNS)})"
)


class SpeedResultStore:
    """Storage service around a single SQLite connection."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._lock = Lock()
        self._conn = sqlite3.connect(db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row

    def init_schema(self) -> None:
        """Create the table and indexes if missing. Safe to call repeatedly."""
        with self._lock:
            self._conn.executescript(SCHEMA)
            self._conn.commit()
        log.info(f"Schema ready at {self.db_path}")

    def insert(self, row: Dict[str, Any]) -> int:
        """Insert one result and return its id."""
        params = tuple(row.get(column) for column in COLUMNS)
        with self._lock:
            with self._conn:
                cursor = self._conn.execute(INSERT_SQL, params)
            return cursor.lastrowid

    def fetch_all(self, sql: str, params: Sequence[Any] = ()) -> List[Dict[str, Any]]:
        with self._lock:
            rows = self._conn.execute(sql, params).fetchall()
        return [dict(r) for r in rows]

    def fetch_one(self, sql: str, params: Sequence[Any] = ()) -> Optional[Dict[str, Any]]:
        with self._lock:
            row = self._conn.execute(sql, params).fetchone()
        return dict(row) if row else None

    def count(self) -> int:
        """Return number of stored results."""
        row = self.fetch_one(f"SELECT COUNT(*) AS n FROM {TABLE_NAME}")
        return row["n"] if row else 0

    def index_names(self) -> List[str]:
        rows = self.fetch_all(
            "SELECT name FROM sqlite_master WHERE type = 'index' AND tbl_name = ? "
            "AND name NOT LIKE 'sqlite_%' ORDER BY name",
            (TABLE_NAME,),
        )
        return [r["name"] for r in rows]

    def close(self) -> None:
        with self._lock:
            self._conn.close()
