"""Scanning for provisioning targets."""

from __future__ import annotations

import asyncio
import logging

from .exceptions import NetcfgError
from .models.advertisement import DeviceInfo
from .transport.base import BLETransport

_LOGGER = logging.getLogger(__name__)

DEFAULT_SCAN_TIMEOUT_MS = 3000


def _rssi_sort_key(device: DeviceInfo) -> tuple[bool, int]:
    # Strongest first, unknown RSSI last
    return (device.rssi is None, -(device.rssi or 0))


async def discover_devices(
        transport: BLETransport,
        timeout_ms: int = DEFAULT_SCAN_TIMEOUT_MS,
) -> list[DeviceInfo]:
    """Scan for nearby peripherals and flag likely provisioning targets.

    Every peripheral with advertisement data is returned; ``matched`` only
    marks the ones that look like provisioning targets.

    Args:
        transport: BLE transport to scan with
        timeout_ms: Scan duration in milliseconds (default: 3000)

    Returns:
        Devices sorted by descending RSSI, unknown RSSI last

    Raises:
        ValueError: If timeout_ms is negative
    """
    if timeout_ms < 0:
        raise ValueError(f"timeout_ms must not be negative, got {timeout_ms}")

    await transport.start_scan()
    try:
        await asyncio.sleep(timeout_ms / 1000)

        devices = []
        for peripheral_id in await transport.peripherals():
            properties = await transport.properties(peripheral_id)
            if properties is None:
                continue
            devices.append(DeviceInfo.from_properties(peripheral_id, properties))
    finally:
        try:
            await transport.stop_scan()
        except NetcfgError as e:
            _LOGGER.warning("Error stopping scan: %s", e)

    devices.sort(key=_rssi_sort_key)
    _LOGGER.debug(
        "Scan found %d devices (%d matched)",
        len(devices),
        sum(device.matched for device in devices),
    )
    return devices
