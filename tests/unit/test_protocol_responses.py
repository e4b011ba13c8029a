"""Test status notification decoding."""

import pytest

from netcfg_ble.models.enums import StatusCode
from netcfg_ble.models.status import StatusEvent
from netcfg_ble.protocol.commands import STATUS_UUID, WRITE_UUID
from netcfg_ble.protocol.responses import (
    decode_notification,
    is_status_characteristic,
    parse_status_notification,
    status_name,
)


class TestParseStatusNotification:
    """Test decoding of raw status values."""

    @pytest.mark.parametrize("data", [b"", b"\x00"])
    def test_too_short_yields_nothing(self, data):
        assert parse_status_notification(data) is None

    def test_ready(self):
        event = parse_status_notification(bytes([0x00, 0x01]))
        assert event == StatusEvent(code=0x0100, name="READY", hex="0x0100")

    def test_error(self):
        event = parse_status_notification(bytes([0x0A, 0x01]))
        assert event.name == "ERROR"
        assert event.hex == "0x010A"

    def test_unknown_code_still_emitted(self):
        event = parse_status_notification(b"\xff\xff")
        assert event == StatusEvent(code=0xFFFF, name="UNKNOWN", hex="0xFFFF")

    def test_trailing_bytes_ignored(self):
        event = parse_status_notification(bytes([0x04, 0x01, 0xDE, 0xAD]))
        assert event.name == "SUCCESS"

    def test_full_table(self):
        expected = [
            "READY", "START", "INPROCESS", "CERT_READY", "SUCCESS", "REBOOTING",
            "IDLE", "SSID", "PWD", "CERT_ERR", "ERROR",
        ]
        for offset, name in enumerate(expected):
            assert status_name(0x0100 + offset) == name
            assert StatusCode(0x0100 + offset).name == name

    def test_to_dict(self):
        event = parse_status_notification(bytes([0x05, 0x01]))
        assert event.to_dict() == {"code": 0x0105, "name": "REBOOTING", "hex": "0x0105"}


class TestDecodeNotification:
    """Test source characteristic filtering."""

    def test_status_uuid_decoded(self):
        assert decode_notification(STATUS_UUID, b"\x00\x01").name == "READY"

    def test_uppercase_and_short_uuid_accepted(self):
        assert is_status_characteristic(STATUS_UUID.upper())
        assert is_status_characteristic("e404")

    def test_other_characteristic_dropped(self):
        assert decode_notification(WRITE_UUID, b"\x00\x01") is None

    def test_garbage_uuid_dropped(self):
        assert decode_notification("not-a-uuid", b"\x00\x01") is None

    def test_short_value_dropped(self):
        assert decode_notification(STATUS_UUID, b"\x01") is None
