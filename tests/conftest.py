"""Shared pytest fixtures."""
import pytest

from app import create_app
from speed_monitor.config import Config
from speed_monitor.storage import SpeedResultStore


@pytest.fixture
def store():
    store = SpeedResultStore(":memory:")
    store.init_schema()
    yield store
    store.close()


@pytest.fixture
def config(tmp_path):
    return Config(db_path=str(tmp_path / "speed_monitor.db"))


@pytest.fixture
def app(config, store):
    app = create_app(config, store=store)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def sample_payload():
    return {
        "user_id": "alice",
        "hostname": "alice-mbp",
        "timestamp": "2024-01-15T10:00:00.000Z",
        "download_mbps": 95.3,
        "upload_mbps": 12.4,
        "ping_ms": 15.0,
        "network_ssid": "HomeWifi",
        "external_ip": "203.0.113.7",
        "status": "success",
    }
