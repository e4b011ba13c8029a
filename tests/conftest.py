"""Shared fixtures: an in-memory BLE transport and zero-delay timings."""

from __future__ import annotations

import asyncio

import pytest

from netcfg_ble.exceptions import BLEConnectionError, BLEWriteError
from netcfg_ble.models.advertisement import PeripheralProperties
from netcfg_ble.models.config import ProvisioningConfig
from netcfg_ble.protocol import SERVICE_UUID, STATUS_UUID, WRITE_UUID
from netcfg_ble.transport.base import GattCharacteristic, GattService, Notification

DEVICE_ID = "AA:BB:CC:DD:EE:FF"


def provisioning_service(
        write_props: tuple[str, ...] = ("write", "write-without-response"),
        status_props: tuple[str, ...] = ("read", "notify"),
) -> GattService:
    return GattService(
        uuid=SERVICE_UUID,
        characteristics=[
            GattCharacteristic(WRITE_UUID, frozenset(write_props)),
            GattCharacteristic(STATUS_UUID, frozenset(status_props)),
        ],
    )


class FakeTransport:
    """In-memory BLETransport that records every call."""

    def __init__(self) -> None:
        self.devices: dict[str, PeripheralProperties | None] = {
            DEVICE_ID: PeripheralProperties(name="NetCfg-1234", rssi=-50),
        }
        self.services: list[GattService] = [provisioning_service()]
        self.connected: set[str] = set()
        self.connect_errors: list[Exception] = []
        self.write_errors: list[Exception | None] = []
        self.notify_error: Exception | None = None
        self.disconnect_error: Exception | None = None

        self.calls: list[str] = []
        self.writes: list[tuple[str, str, bytes, bool]] = []
        self.subscriptions: list[tuple[str, str]] = []
        self.scanning = False
        self._queue: asyncio.Queue[Notification | None] = asyncio.Queue()

    async def start_scan(self) -> None:
        self.calls.append("start_scan")
        self.scanning = True

    async def stop_scan(self) -> None:
        self.calls.append("stop_scan")
        self.scanning = False

    async def peripherals(self) -> list[str]:
        return list(self.devices)

    async def properties(self, peripheral_id: str) -> PeripheralProperties | None:
        return self.devices.get(peripheral_id)

    async def connect(self, peripheral_id: str) -> None:
        self.calls.append("connect")
        if self.connect_errors:
            raise self.connect_errors.pop(0)
        self.connected.add(peripheral_id)

    async def is_connected(self, peripheral_id: str) -> bool:
        return peripheral_id in self.connected

    async def disconnect(self, peripheral_id: str) -> None:
        self.calls.append("disconnect")
        self.connected.discard(peripheral_id)
        self.close_stream()
        if self.disconnect_error is not None:
            raise self.disconnect_error

    async def discover_services(self, peripheral_id: str) -> list[GattService]:
        self.calls.append("discover_services")
        return self.services

    async def write(self, peripheral_id: str, uuid: str, data: bytes, response: bool) -> None:
        self.calls.append("write")
        if self.write_errors:
            error = self.write_errors.pop(0)
            if error is not None:
                raise error
        self.writes.append((peripheral_id, uuid, bytes(data), response))

    async def subscribe(self, peripheral_id: str, uuid: str) -> None:
        self.calls.append("subscribe")
        self.subscriptions.append((peripheral_id, uuid))

    async def notifications(self, peripheral_id: str):
        if self.notify_error is not None:
            raise self.notify_error
        return self._drain()

    async def _drain(self):
        while True:
            notification = await self._queue.get()
            if notification is None:
                return
            yield notification

    def push(self, uuid: str, value: bytes) -> None:
        self._queue.put_nowait(Notification(uuid=uuid, value=value))

    def close_stream(self) -> None:
        self._queue.put_nowait(None)

    @property
    def written_packets(self) -> list[bytes]:
        return [data for _, _, data, _ in self.writes]


@pytest.fixture
def fast_config() -> ProvisioningConfig:
    """Default attempts with every delay set to zero."""
    return ProvisioningConfig(
        connect_backoff=0,
        settle_delay=0,
        write_retry_delay=0,
        packet_interval=0,
        scan_timeout_ms=0,
    )


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def events() -> list:
    return []


@pytest.fixture
def transient_error() -> BLEConnectionError:
    return BLEConnectionError("Failed to connect: le-connection-abort-by-local")


@pytest.fixture
def write_error() -> BLEWriteError:
    return BLEWriteError("Write failed: GATT error 0x0e")
