"""BLE advertisement data and provisioning target matching."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable

NAME_MARKER = "netcfg"
DATA_MARKER = b"\xab\x0a"
UNKNOWN_NAME = "Unknown"


@dataclass
class PeripheralProperties:
    """Advertisement metadata reported for one discovered peripheral.

    Attributes:
        name: Advertised local name, if any
        rssi: Signal strength in dBm, if known
        manufacturer_data: Company ID -> payload (ID stripped, as Bleak reports it)
        service_data: Service UUID -> payload
    """
    name: str | None = None
    rssi: int | None = None
    manufacturer_data: dict[int, bytes] = field(default_factory=dict)
    service_data: dict[str, bytes] = field(default_factory=dict)


@dataclass
class DeviceInfo:
    """Scan result handed back to the caller."""
    id: str
    name: str
    rssi: int | None
    matched: bool

    @classmethod
    def from_properties(cls, device_id: str, properties: PeripheralProperties) -> DeviceInfo:
        return cls(
            id=device_id,
            name=properties.name or UNKNOWN_NAME,
            rssi=properties.rssi,
            matched=is_provisioning_target(properties),
        )


def contains_marker(data: bytes) -> bool:
    """Check for the AB 0A marker at any offset."""
    return DATA_MARKER in bytes(data)


def matches_device_name(name: str | None) -> bool:
    """Check the local name for the "netcfg" marker, ignoring case."""
    return bool(name) and NAME_MARKER in name.lower()


def _any_marker(values: Iterable[bytes]) -> bool:
    return any(contains_marker(value) for value in values)


def is_provisioning_target(properties: PeripheralProperties) -> bool:
    """Decide whether a peripheral looks like a provisioning target.

    Matches on the local name, any manufacturer data value, or any
    service data value. Advisory only: callers still see non-matching devices.
    """
    return (
        matches_device_name(properties.name)
        or _any_marker(properties.manufacturer_data.values())
        or _any_marker(properties.service_data.values())
    )
