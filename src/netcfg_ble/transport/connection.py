"""BLE connection management."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..exceptions import (
    BLEConnectionError,
    DeviceNotFoundError,
    NotConnectedError,
    ServiceNotFoundError,
)
from ..models.config import ProvisioningConfig
from ..models.enums import ConnectionState
from ..models.status import StatusCallback, StatusEvent
from ..protocol import SERVICE_UUID, STATUS_UUID, WRITE_UUID
from .base import BLETransport, GattCharacteristic, GattService
from .listener import StatusListener
from .retry import RetryPolicy

_LOGGER = logging.getLogger(__name__)

STATUS_CHAR_NO_NOTIFY = "STATUS_CHAR_NO_NOTIFY"


@dataclass
class PeripheralHandle:
    """The active peripheral and everything resolved while connecting."""

    peripheral_id: str
    write_characteristic: GattCharacteristic
    status_characteristic: GattCharacteristic
    listener: StatusListener | None = None


def _same_uuid(left: str, right: str) -> bool:
    return left.lower() == right.lower()


def find_characteristics(
        services: list[GattService],
) -> tuple[GattCharacteristic, GattCharacteristic]:
    """Resolve the write and status characteristics of the provisioning service.

    Raises:
        ServiceNotFoundError: If the service or either characteristic is missing
    """
    service = next((s for s in services if _same_uuid(s.uuid, SERVICE_UUID)), None)
    if service is None:
        raise ServiceNotFoundError("NETCFG_BLE service not found")

    write_char = next(
        (
            c for c in service.characteristics
            if _same_uuid(c.uuid, WRITE_UUID) and c.can_write
        ),
        None,
    )
    if write_char is None:
        raise ServiceNotFoundError("Write characteristic not found")

    status_char = next(
        (
            c for c in service.characteristics
            if _same_uuid(c.uuid, STATUS_UUID) and (c.can_notify or c.can_read)
        ),
        None,
    )
    if status_char is None:
        raise ServiceNotFoundError("Status characteristic not found")

    return write_char, status_char


class ConnectionManager:
    """Owns the single active peripheral connection.

    Features:
    - Connect with bounded retry and fixed backoff
    - Service discovery and characteristic resolution on every connect
    - Status listener tied to the lifetime of the connection
    - Lock-guarded active handle shared with command paths
    """

    def __init__(
            self,
            transport: BLETransport,
            status_callback: StatusCallback,
            config: ProvisioningConfig | None = None,
    ):
        """Initialize connection manager.

        Args:
            transport: BLE transport (adapter handle)
            status_callback: Receives StatusEvents from the listener
            config: Timing configuration (default: ProvisioningConfig())
        """
        self._transport = transport
        self._status_callback = status_callback
        self._config = config or ProvisioningConfig()
        self._connect_policy = RetryPolicy(
            max_attempts=self._config.connect_attempts,
            delay=self._config.connect_backoff,
        )

        self._lock = asyncio.Lock()
        self._active: PeripheralHandle | None = None
        self._state = ConnectionState.DISCONNECTED

    @property
    def state(self) -> ConnectionState:
        """Current connection lifecycle state."""
        return self._state

    @property
    def active_id(self) -> str | None:
        """Identifier of the active peripheral, if any."""
        return self._active.peripheral_id if self._active else None

    async def connect(self, peripheral_id: str) -> PeripheralHandle:
        """Connect to a peripheral and publish it as the active connection.

        Args:
            peripheral_id: Identifier reported by the scan

        Returns:
            The now active PeripheralHandle

        Raises:
            DeviceNotFoundError: If the adapter does not know the peripheral
            BLEConnectionError: If every connect attempt fails or another
                device is still connected
            ServiceNotFoundError: If the provisioning service is incomplete
        """
        async with self._lock:
            current = self._active
        if current is not None and current.peripheral_id != peripheral_id:
            if await self._transport.is_connected(current.peripheral_id):
                raise BLEConnectionError(
                    f"Device {current.peripheral_id} is already connected; disconnect first"
                )

        if peripheral_id not in await self._transport.peripherals():
            raise DeviceNotFoundError("Device not found")

        try:
            if await self._transport.is_connected(peripheral_id):
                _LOGGER.debug("%s already connected, skipping connect", peripheral_id)
            else:
                self._state = ConnectionState.CONNECTING
                _LOGGER.debug(
                    "Connecting to %s (max_attempts=%d)",
                    peripheral_id,
                    self._connect_policy.max_attempts,
                )
                await self._connect_policy.run(
                    lambda: self._transport.connect(peripheral_id),
                    description=f"Connect to {peripheral_id}",
                )

            self._state = ConnectionState.SERVICE_DISCOVERY
            services = await self._transport.discover_services(peripheral_id)
            # Let the platform stack settle before characteristic lookup
            await asyncio.sleep(self._config.settle_delay)

            write_char, status_char = find_characteristics(services)
            handle = PeripheralHandle(peripheral_id, write_char, status_char)

            if status_char.can_notify:
                await self._transport.subscribe(peripheral_id, status_char.uuid)
                handle.listener = StatusListener(
                    self._transport,
                    peripheral_id,
                    self._status_callback,
                    on_closed=lambda: self._on_stream_closed(handle),
                )
            else:
                _LOGGER.warning("Status characteristic of %s cannot notify", peripheral_id)
                self._status_callback(
                    StatusEvent(code=0, name=STATUS_CHAR_NO_NOTIFY, hex="0x0000")
                )
        except Exception:
            self._state = (
                ConnectionState.READY if self._active else ConnectionState.DISCONNECTED
            )
            raise

        async with self._lock:
            previous, self._active = self._active, handle
            self._state = ConnectionState.READY
        if previous is not None and previous.listener is not None:
            await previous.listener.stop()
        if handle.listener is not None:
            handle.listener.start()

        _LOGGER.info("Connected to %s", peripheral_id)
        return handle

    async def get_active(self) -> PeripheralHandle:
        """Return the active handle if its link is still up.

        Raises:
            NotConnectedError: If nothing is connected or the link was lost
        """
        async with self._lock:
            if self._active is None:
                raise NotConnectedError("No device connected")
            handle = self._active
            if not await self._transport.is_connected(handle.peripheral_id):
                await self._drop(handle)
                raise NotConnectedError("Device is not connected")
            return handle

    async def disconnect(self) -> None:
        """Disconnect the active peripheral.

        The active handle is cleared even if the transport reports an error.

        Raises:
            NotConnectedError: If nothing is connected or the link was lost
        """
        async with self._lock:
            if self._active is None:
                raise NotConnectedError("No device connected")
            handle = self._active
            if not await self._transport.is_connected(handle.peripheral_id):
                await self._drop(handle)
                raise NotConnectedError("Device is not connected")

            _LOGGER.debug("Disconnecting from %s", handle.peripheral_id)
            try:
                await self._transport.disconnect(handle.peripheral_id)
            finally:
                self._active = None
                self._state = ConnectionState.DISCONNECTED
                if handle.listener is not None:
                    await handle.listener.stop()

        _LOGGER.info("Disconnected from %s", handle.peripheral_id)

    async def _drop(self, handle: PeripheralHandle) -> None:
        """Forget a handle whose link is gone. Caller holds the lock."""
        if self._active is not handle:
            return
        _LOGGER.warning("Lost connection to %s", handle.peripheral_id)
        self._active = None
        self._state = ConnectionState.DISCONNECTED
        if handle.listener is not None:
            await handle.listener.stop()

    async def _on_stream_closed(self, handle: PeripheralHandle) -> None:
        async with self._lock:
            if self._active is not handle:
                return
            _LOGGER.warning("Lost connection to %s", handle.peripheral_id)
            self._active = None
            self._state = ConnectionState.DISCONNECTED
