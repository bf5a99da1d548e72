"""Error taxonomy shared by the handlers and the HTTP layer."""


class SpeedMonitorError(Exception):
    """Base error. `status_code` is the HTTP status the front maps it to."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"error": self.message}


class ValidationError(SpeedMonitorError):
    """Client sent a payload missing a required field."""

    status_code = 400


class StorageError(SpeedMonitorError):
    """Insert or query against the store failed. Message is safe to return."""

    status_code = 500
