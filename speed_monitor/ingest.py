"""Ingestion of one speed test result per call."""
import sqlite3
from typing import Any, Dict, Mapping, Optional

from .constants import MSG_SAVE_FAILED
from .errors import StorageError
from .logging import get_logger, log_execution
from .models import SpeedResultInput
from .storage import SpeedResultStore

log = get_logger(__name__)


@log_execution
def submit(store: SpeedResultStore, payload: Optional[Mapping[str, Any]]) -> Dict[str, int]:
    """
    Validate `payload` and append it to the store.

    Raises ValidationError when user_id is missing (nothing is written) and
    StorageError when the insert fails. Returns {"id": <new row id>}.
    """
    record = SpeedResultInput.from_payload(payload)

    try:
        new_id = store.insert(record.as_row())
    except sqlite3.Error as e:
        log.exception(f"Error inserting result: {e}", extra={"user_id": record.user_id})
        raise StorageError(MSG_SAVE_FAILED) from e

    log.info(
        f"Stored result {new_id} for {record.user_id}",
        extra={"id": new_id, "user_id": record.user_id, "status": record.status},
    )
    return {"id": new_id}
