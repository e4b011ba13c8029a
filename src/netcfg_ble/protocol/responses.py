"""Status notification decoding."""

from __future__ import annotations

import struct
from typing import Final

from bleak.uuids import normalize_uuid_str

from ..models.enums import StatusCode
from ..models.status import StatusEvent
from .commands import STATUS_UUID

UNKNOWN_STATUS = "UNKNOWN"

STATUS_NAMES: Final[dict[int, str]] = {code.value: code.name for code in StatusCode}


def status_name(code: int) -> str:
    """Resolve a status code to its name, "UNKNOWN" if not in the table."""
    return STATUS_NAMES.get(code, UNKNOWN_STATUS)


def parse_status_notification(data: bytes) -> StatusEvent | None:
    """Decode a status notification payload.

    Format: [code:2 LE][...ignored]

    Args:
        data: Raw notification value

    Returns:
        StatusEvent, or None if data is shorter than 2 bytes
    """
    if len(data) < 2:
        return None

    code = struct.unpack("<H", data[0:2])[0]
    return StatusEvent(code=code, name=status_name(code), hex=f"0x{code:04X}")


def is_status_characteristic(uuid: str) -> bool:
    """Check whether a characteristic UUID is the status characteristic."""
    try:
        return normalize_uuid_str(uuid) == STATUS_UUID
    except ValueError:
        return False


def decode_notification(uuid: str, data: bytes) -> StatusEvent | None:
    """Decode a notification, dropping those not sent by the status characteristic."""
    if not is_status_characteristic(uuid):
        return None
    return parse_status_notification(data)
