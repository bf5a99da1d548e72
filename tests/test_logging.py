import json
import logging

import pytest

from speed_monitor.config import Config
from speed_monitor.logging import JsonFormatter, build_handlers, log_execution, utc_now_iso


def test_utc_now_iso_format():
    stamp = utc_now_iso()
    assert stamp.endswith("Z")
    assert "+00:00" not in stamp


def test_formatter_merges_extra_fields():
    record = logging.LogRecord("speed_monitor.ingest", logging.INFO, __file__, 1, "Stored result", (), None)
    record.extra_fields = {"id": 7, "user_id": "alice"}

    entry = json.loads(JsonFormatter(hostname="box").format(record))
    assert entry["message"] == "Stored result"
    assert entry["level"] == "INFO"
    assert entry["hostname"] == "box"
    assert entry["id"] == 7
    assert entry["user_id"] == "alice"


def test_file_handler_only_when_configured(tmp_path):
    assert len(build_handlers(Config())) == 1

    handlers = build_handlers(Config(log_file=str(tmp_path / "server.log")))
    assert len(handlers) == 2
    for handler in handlers:
        handler.close()


def test_log_execution_reraises():
    @log_execution
    def boom():
        raise RuntimeError("nope")

    with pytest.raises(RuntimeError):
        boom()
