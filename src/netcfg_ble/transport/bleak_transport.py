"""BLE transport backed by Bleak."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, AsyncIterator

from bleak import BleakClient, BleakScanner
from bleak.exc import BleakError
from bleak_retry_connector import BleakClientWithServiceCache, establish_connection

from ..exceptions import (
    AdapterNotFoundError,
    BLEConnectionError,
    BLETimeoutError,
    BLEWriteError,
    DeviceNotFoundError,
)
from ..models.advertisement import PeripheralProperties
from .base import GattCharacteristic, GattService, Notification

if TYPE_CHECKING:
    from bleak.backends.characteristic import BleakGATTCharacteristic
    from bleak.backends.device import BLEDevice
    from bleak.backends.scanner import AdvertisementData

_LOGGER = logging.getLogger(__name__)


class BleakTransport:
    """BLETransport implementation on top of Bleak.

    Features:
    - Passive bookkeeping of every advertisement seen while scanning
    - Connections through bleak-retry-connector (retries are left to the caller)
    - One notification queue per connected peripheral, closed on disconnect
    """

    def __init__(self, adapter: str | None = None, timeout: float = 10.0):
        """Initialize transport.

        Args:
            adapter: Local adapter name, e.g. "hci0" (default: system default)
            timeout: Connect and lookup timeout in seconds (default: 10)
        """
        self.adapter = adapter
        self.timeout = timeout

        scanner_kwargs = {"adapter": adapter} if adapter else {}
        self._scanner = BleakScanner(
            detection_callback=self._detection_callback, **scanner_kwargs
        )
        self._seen: dict[str, tuple[BLEDevice, AdvertisementData]] = {}
        self._clients: dict[str, BleakClient] = {}
        self._queues: dict[str, asyncio.Queue[Notification | None]] = {}
        self._subscribed: dict[str, set[str]] = {}

    def _detection_callback(self, device: BLEDevice, advertisement: AdvertisementData) -> None:
        self._seen[device.address] = (device, advertisement)

    async def start_scan(self) -> None:
        try:
            await self._scanner.start()
        except BleakError as e:
            raise AdapterNotFoundError(f"No usable BLE adapter: {e}") from e
        _LOGGER.debug("Scan started")

    async def stop_scan(self) -> None:
        try:
            await self._scanner.stop()
        except BleakError as e:
            raise BLEConnectionError(f"Failed to stop scan: {e}") from e
        _LOGGER.debug("Scan stopped (%d devices seen)", len(self._seen))

    async def peripherals(self) -> list[str]:
        return list(dict.fromkeys([*self._seen, *self._clients]))

    async def properties(self, peripheral_id: str) -> PeripheralProperties | None:
        seen = self._seen.get(peripheral_id)
        if seen is None:
            return None
        device, advertisement = seen
        return PeripheralProperties(
            name=advertisement.local_name or device.name,
            rssi=advertisement.rssi,
            manufacturer_data=dict(advertisement.manufacturer_data),
            service_data=dict(advertisement.service_data),
        )

    async def connect(self, peripheral_id: str) -> None:
        """Establish a single connection attempt.

        Raises:
            DeviceNotFoundError: If the device was not seen by the scanner
            BLEConnectionError: If the connection fails
            BLETimeoutError: If the connection times out
        """
        if peripheral_id not in self._seen:
            raise DeviceNotFoundError(f"Device {peripheral_id} not seen during scan")
        device = self._seen[peripheral_id][0]

        queue: asyncio.Queue[Notification | None] = asyncio.Queue()
        try:
            client = await establish_connection(
                client_class=BleakClientWithServiceCache,
                device=device,
                name=device.name or peripheral_id,
                disconnected_callback=lambda _client: self._on_disconnected(peripheral_id, queue),
                max_attempts=1,
                use_services_cache=False,
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Connection timeout after {self.timeout}s") from e
        except Exception as e:
            raise BLEConnectionError(f"Failed to connect: {e}") from e

        self._clients[peripheral_id] = client
        self._queues[peripheral_id] = queue
        self._subscribed[peripheral_id] = set()
        _LOGGER.debug("Connected to %s", peripheral_id)

    def _on_disconnected(
            self, peripheral_id: str, queue: asyncio.Queue[Notification | None]
    ) -> None:
        _LOGGER.debug("%s disconnected", peripheral_id)
        queue.put_nowait(None)

    async def is_connected(self, peripheral_id: str) -> bool:
        client = self._clients.get(peripheral_id)
        return client is not None and client.is_connected

    async def disconnect(self, peripheral_id: str) -> None:
        client = self._clients.pop(peripheral_id, None)
        queue = self._queues.pop(peripheral_id, None)
        self._subscribed.pop(peripheral_id, None)
        if client is None:
            return
        try:
            await client.disconnect()
        except BleakError as e:
            _LOGGER.warning("Error during disconnect: %s", e)
        finally:
            if queue is not None:
                queue.put_nowait(None)

    def _client(self, peripheral_id: str) -> BleakClient:
        client = self._clients.get(peripheral_id)
        if client is None or not client.is_connected:
            raise BLEConnectionError("Not connected")
        return client

    async def discover_services(self, peripheral_id: str) -> list[GattService]:
        client = self._client(peripheral_id)
        return [
            GattService(
                uuid=service.uuid,
                characteristics=[
                    GattCharacteristic(uuid=char.uuid, properties=frozenset(char.properties))
                    for char in service.characteristics
                ],
            )
            for service in client.services
        ]

    async def write(self, peripheral_id: str, uuid: str, data: bytes, response: bool) -> None:
        client = self._client(peripheral_id)
        try:
            await client.write_gatt_char(uuid, data, response=response)
        except asyncio.TimeoutError as e:
            raise BLETimeoutError(f"Write timed out after {self.timeout}s") from e
        except BleakError as e:
            raise BLEWriteError(f"Write failed: {e}") from e

    async def subscribe(self, peripheral_id: str, uuid: str) -> None:
        client = self._client(peripheral_id)
        subscribed = self._subscribed.setdefault(peripheral_id, set())
        if uuid in subscribed:
            return

        queue = self._queues[peripheral_id]

        def _notification_callback(sender: BleakGATTCharacteristic, data: bytearray) -> None:
            queue.put_nowait(Notification(uuid=sender.uuid, value=bytes(data)))

        try:
            await client.start_notify(uuid, _notification_callback)
        except BleakError as e:
            raise BLEConnectionError(f"Failed to subscribe to {uuid}: {e}") from e
        subscribed.add(uuid)
        _LOGGER.debug("Notifications started for %s", uuid)

    async def notifications(self, peripheral_id: str) -> AsyncIterator[Notification]:
        self._client(peripheral_id)
        return self._drain(self._queues[peripheral_id])

    async def _drain(
            self, queue: asyncio.Queue[Notification | None]
    ) -> AsyncIterator[Notification]:
        while True:
            notification = await queue.get()
            if notification is None:
                return
            yield notification
