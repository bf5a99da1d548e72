"""
Read paths over `speed_results`.

- list_results: paginated listing, optionally filtered by user_id
- list_for_user: most recent results for one user_id
- get_stats: overall / per-user / hourly aggregates over successful tests

None of these mutate the store, and all of them return empty collections or
null aggregates on an empty store.
"""
import datetime
import sqlite3
from typing import Any, Dict, List, Optional

import pandas as pd
import pytz

from .constants import (
    DEFAULT_LIST_LIMIT,
    DEFAULT_OFFSET,
    DEFAULT_USER_LIMIT,
    HOUR_BUCKET_FORMAT,
    MAX_LIST_LIMIT,
    MAX_USER_LIMIT,
    MSG_FETCH_RESULTS_FAILED,
    MSG_FETCH_STATS_FAILED,
    STATS_DECIMALS,
    STATS_WINDOW_HOURS,
    SUCCESS_STATUS,
    TABLE_NAME,
)
from .errors import StorageError
from .logging import get_logger, log_execution
from .models import parse_int
from .storage import SpeedResultStore

log = get_logger(__name__)

# --- SQL ----------------------------------------------------------------------
LIST_ALL_SQL = f"""
    SELECT * FROM {TABLE_NAME}
    ORDER BY timestamp DESC, id DESC
    LIMIT ? OFFSET ?
"""

LIST_BY_USER_SQL = f"""
    SELECT * FROM {TABLE_NAME}
    WHERE user_id = ?
    ORDER BY timestamp DESC, id DESC
    LIMIT ? OFFSET ?
"""

OVERALL_SQL = f"""
    SELECT
        COUNT(*) AS total_tests,
        COUNT(DISTINCT user_id) AS total_users,
        ROUND(AVG(download_mbps), 2) AS avg_download,
        ROUND(AVG(upload_mbps), 2) AS avg_upload,
        ROUND(AVG(ping_ms), 2) AS avg_ping,
        ROUND(MIN(download_mbps), 2) AS min_download,
        ROUND(MAX(download_mbps), 2) AS max_download
    FROM {TABLE_NAME}
    WHERE status = ?
"""

# hostname comes from the user's most recent successful row
PER_USER_SQL = f"""
    SELECT
        s.user_id,
        (
            SELECT h.hostname FROM {TABLE_NAME} h
            WHERE h.user_id = s.user_id AND h.status = ?
            ORDER BY h.timestamp DESC, h.id DESC
            LIMIT 1
        ) AS hostname,
        COUNT(*) AS test_count,
        ROUND(AVG(s.download_mbps), 2) AS avg_download,
        ROUND(AVG(s.upload_mbps), 2) AS avg_upload,
        ROUND(AVG(s.ping_ms), 2) AS avg_ping,
        MAX(s.timestamp) AS last_test
    FROM {TABLE_NAME} s
    WHERE s.status = ?
    GROUP BY s.user_id
    ORDER BY avg_download DESC, s.user_id
"""

# datetime() normalizes "T"/"Z"/offset timestamps to UTC before comparing
HOURLY_WINDOW_SQL = f"""
    SELECT timestamp, download_mbps, upload_mbps
    FROM {TABLE_NAME}
    WHERE status = ?
      AND datetime(timestamp) > datetime(?)
"""


# --- Helpers ------------------------------------------------------------------
def clamp_limit(value, default: int, maximum: int) -> int:
    """Parse a limit parameter; non-positive or junk input falls back to default."""
    limit = parse_int(value, default)
    if limit <= 0:
        limit = default
    return min(limit, maximum)


def parse_offset(value) -> int:
    offset = parse_int(value, DEFAULT_OFFSET)
    return max(offset, 0)


def _none_if_nan(value, cast=float):
    if value is None or pd.isna(value):
        return None
    return cast(value)


# --- List ---------------------------------------------------------------------
@log_execution
def list_results(
    store: SpeedResultStore,
    user_id: Optional[str] = None,
    limit=None,
    offset=None,
) -> List[Dict[str, Any]]:
    """Most recent results first, across all users unless user_id is given."""
    limit = clamp_limit(limit, DEFAULT_LIST_LIMIT, MAX_LIST_LIMIT)
    offset = parse_offset(offset)

    try:
        if user_id:
            return store.fetch_all(LIST_BY_USER_SQL, (user_id, limit, offset))
        return store.fetch_all(LIST_ALL_SQL, (limit, offset))
    except sqlite3.Error as e:
        log.exception(f"Error fetching results: {e}")
        raise StorageError(MSG_FETCH_RESULTS_FAILED) from e


@log_execution
def list_for_user(store: SpeedResultStore, user_id: str, limit=None) -> List[Dict[str, Any]]:
    """Most recent results for exactly one user_id. Unknown ids give []."""
    limit = clamp_limit(limit, DEFAULT_USER_LIMIT, MAX_USER_LIMIT)

    try:
        return store.fetch_all(LIST_BY_USER_SQL, (user_id or "", limit, 0))
    except sqlite3.Error as e:
        log.exception(f"Error fetching user results: {e}", extra={"user_id": user_id})
        raise StorageError(MSG_FETCH_RESULTS_FAILED) from e


# --- Stats --------------------------------------------------------------------
def hourly_buckets(
    rows: List[Dict[str, Any]],
    tz=pytz.utc,
) -> List[Dict[str, Any]]:
    """
    Group rows into hour buckets in `tz`.

    Each bucket has hour ("YYYY-MM-DD HH:00"), avg_download, avg_upload and
    test_count, sorted chronologically. Rows whose timestamp cannot be parsed
    are dropped.
    """
    if not rows:
        return []

    df = pd.DataFrame(rows)
    df["ts"] = pd.to_datetime(df["timestamp"], utc=True, errors="coerce", format="mixed")
    df = df.dropna(subset=["ts"])
    if df.empty:
        return []

    # key on the UTC instant each local hour starts at; repeated DST hours stay apart
    local = df["ts"].dt.tz_convert(tz)
    into_hour = (
        pd.to_timedelta(local.dt.minute, unit="m")
        + pd.to_timedelta(local.dt.second, unit="s")
        + pd.to_timedelta(local.dt.microsecond, unit="us")
        + pd.to_timedelta(local.dt.nanosecond, unit="ns")
    )
    df["bucket"] = df["ts"] - into_hour
    grouped = (
        df.groupby("bucket")
        .agg(
            avg_download=("download_mbps", "mean"),
            avg_upload=("upload_mbps", "mean"),
            test_count=("ts", "size"),
        )
        .round(STATS_DECIMALS)
        .reset_index()
        .sort_values("bucket")
    )

    return [
        {
            "hour": row.bucket.tz_convert(tz).strftime(HOUR_BUCKET_FORMAT),
            "avg_download": _none_if_nan(row.avg_download),
            "avg_upload": _none_if_nan(row.avg_upload),
            "test_count": int(row.test_count),
        }
        for row in grouped.itertuples(index=False)
    ]


@log_execution
def get_stats(
    store: SpeedResultStore,
    now: Optional[datetime.datetime] = None,
    tz=pytz.utc,
    window_hours: int = STATS_WINDOW_HOURS,
) -> Dict[str, Any]:
    """
    Aggregate statistics over successful tests.

    `now` anchors the trailing window for the hourly series (defaults to the
    current UTC time); `tz` is the timezone hour buckets are labelled in.
    """
    now = now or datetime.datetime.now(datetime.timezone.utc)
    if now.tzinfo is None:
        now = now.replace(tzinfo=datetime.timezone.utc)
    cutoff = now.astimezone(datetime.timezone.utc) - datetime.timedelta(hours=window_hours)

    try:
        overall = store.fetch_one(OVERALL_SQL, (SUCCESS_STATUS,))
        per_user = store.fetch_all(PER_USER_SQL, (SUCCESS_STATUS, SUCCESS_STATUS))
        window_rows = store.fetch_all(
            HOURLY_WINDOW_SQL,
            (SUCCESS_STATUS, cutoff.strftime("%Y-%m-%d %H:%M:%S")),
        )
    except sqlite3.Error as e:
        log.exception(f"Error fetching stats: {e}")
        raise StorageError(MSG_FETCH_STATS_FAILED) from e

    hourly = hourly_buckets(window_rows, tz=tz)
    log.info(
        f"Computed stats over {overall['total_tests']} successful tests",
        extra={"users": len(per_user), "hourly_buckets": len(hourly)},
    )
    return {
        "overall": overall,
        "perUser": per_user,
        "hourly": hourly,
    }
