"""
Input schema for submitted measurements.

`SpeedResultInput.from_payload` is the only place a raw request body is
interpreted. `user_id` is required; every other field falls back to a
documented default instead of being rejected.
"""
import math
import re
from dataclasses import asdict, dataclass
from typing import Any, Mapping, Optional

from .constants import DEFAULT_METRIC_VALUE, MSG_USER_ID_REQUIRED, SUCCESS_STATUS
from .errors import ValidationError
from .logging import utc_now_iso

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")

# SQLite binds integers as signed 64-bit
SQLITE_INT_MIN = -(2 ** 63)
SQLITE_INT_MAX = 2 ** 63 - 1


def safe_float(value) -> float:
    """Convert a submitted metric to float. Missing or junk values become 0."""
    if not value:
        return DEFAULT_METRIC_VALUE
    try:
        number = float(value)
    except (ValueError, TypeError, OverflowError):
        return DEFAULT_METRIC_VALUE
    return number if math.isfinite(number) else DEFAULT_METRIC_VALUE


def optional_text(value) -> Optional[str]:
    """Falsy values (None, "", 0, false) are stored as NULL; anything else as its string form."""
    if not value:
        return None
    return value if isinstance(value, str) else str(value)


def parse_int(value, default: int) -> int:
    """
    Lenient integer parse for query parameters.

    Accepts a leading integer ("25", " 25rows", "-3") and returns `default`
    for anything else, including None and integers SQLite cannot bind.
    """
    if value is None:
        return default
    if isinstance(value, int) and not isinstance(value, bool):
        number = value
    else:
        match = _LEADING_INT.match(str(value))
        if not match:
            return default
        number = int(match.group(1))
    if not SQLITE_INT_MIN <= number <= SQLITE_INT_MAX:
        return default
    return number


@dataclass
class SpeedResultInput:
    """One measurement as it will be written to `speed_results`."""

    user_id: str
    hostname: Optional[str] = None
    timestamp: Optional[str] = None
    download_mbps: float = DEFAULT_METRIC_VALUE
    upload_mbps: float = DEFAULT_METRIC_VALUE
    ping_ms: float = DEFAULT_METRIC_VALUE
    network_ssid: Optional[str] = None
    external_ip: Optional[str] = None
    status: str = SUCCESS_STATUS

    @classmethod
    def from_payload(cls, payload: Optional[Mapping[str, Any]]) -> "SpeedResultInput":
        """Build from a decoded JSON body, raising ValidationError without user_id."""
        if not isinstance(payload, Mapping):
            payload = {}

        user_id = payload.get("user_id")
        if not user_id:
            raise ValidationError(MSG_USER_ID_REQUIRED)
        user_id = user_id if isinstance(user_id, str) else str(user_id)
        if not user_id.strip():
            raise ValidationError(MSG_USER_ID_REQUIRED)

        return cls(
            user_id=user_id,
            hostname=optional_text(payload.get("hostname")),
            timestamp=optional_text(payload.get("timestamp")) or utc_now_iso(),
            download_mbps=safe_float(payload.get("download_mbps")),
            upload_mbps=safe_float(payload.get("upload_mbps")),
            ping_ms=safe_float(payload.get("ping_ms")),
            network_ssid=optional_text(payload.get("network_ssid")),
            external_ip=optional_text(payload.get("external_ip")),
            status=optional_text(payload.get("status")) or SUCCESS_STATUS,
        )

    def as_row(self) -> dict:
        return asdict(self)
