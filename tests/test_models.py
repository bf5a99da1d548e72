import pytest

from speed_monitor.errors import ValidationError
from speed_monitor.models import SpeedResultInput, optional_text, parse_int, safe_float


@pytest.mark.parametrize("payload", [None, {}, {"user_id": ""}, {"user_id": None}, {"user_id": "   "}, ["alice"]])
def test_missing_user_id_rejected(payload):
    with pytest.raises(ValidationError) as exc:
        SpeedResultInput.from_payload(payload)
    assert exc.value.message == "user_id is required"
    assert exc.value.status_code == 400


def test_defaults_applied():
    record = SpeedResultInput.from_payload({"user_id": "alice"})

    assert record.user_id == "alice"
    assert record.hostname is None
    assert record.network_ssid is None
    assert record.external_ip is None
    assert record.download_mbps == 0
    assert record.upload_mbps == 0
    assert record.ping_ms == 0
    assert record.status == "success"
    assert record.timestamp.endswith("Z")


def test_provided_fields_kept(sample_payload):
    record = SpeedResultInput.from_payload(sample_payload)
    assert record.as_row() == sample_payload


def test_numeric_user_id_stored_as_text():
    assert SpeedResultInput.from_payload({"user_id": 42}).user_id == "42"


def test_safe_float():
    assert safe_float("95.3") == 95.3
    assert safe_float(None) == 0
    assert safe_float("") == 0
    assert safe_float("fast") == 0
    assert safe_float(float("nan")) == 0
    assert safe_float(12) == 12.0


def test_optional_text():
    assert optional_text("") is None
    assert optional_text(None) is None
    assert optional_text("x") == "x"
    assert optional_text(7) == "7"


def test_parse_int():
    assert parse_int("25", 100) == 25
    assert parse_int(" 25rows", 100) == 25
    assert parse_int("-3", 100) == -3
    assert parse_int("abc", 100) == 100
    assert parse_int(None, 100) == 100
    assert parse_int(7, 100) == 7


@pytest.mark.parametrize("user_id", [0, False, 0.0])
def test_falsy_user_id_rejected(user_id):
    with pytest.raises(ValidationError):
        SpeedResultInput.from_payload({"user_id": user_id})


def test_falsy_text_fields_stored_as_null():
    record = SpeedResultInput.from_payload({"user_id": "a", "hostname": 0, "network_ssid": False})
    assert record.hostname is None
    assert record.network_ssid is None


@pytest.mark.parametrize("value", [10 ** 400, -(10 ** 400), "inf", "-inf", "1e999", [1], {"x": 1}])
def test_safe_float_out_of_range_defaults_to_zero(value):
    assert safe_float(value) == 0


@pytest.mark.parametrize("value", ["99999999999999999999", "-99999999999999999999", 2 ** 63, -(2 ** 63) - 1])
def test_parse_int_outside_sqlite_range(value):
    assert parse_int(value, 5) == 5


def test_parse_int_sqlite_range_edges():
    assert parse_int(str(2 ** 63 - 1), 5) == 2 ** 63 - 1
    assert parse_int(-(2 ** 63), 5) == -(2 ** 63)
