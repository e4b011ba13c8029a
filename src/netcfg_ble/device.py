"""Main NETCFG provisioning device class."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from .discovery import discover_devices
from .exceptions import AdapterNotFoundError, NotConnectedError
from .models.advertisement import DeviceInfo
from .models.config import ProvisioningConfig
from .models.enums import ConnectionState
from .models.status import StatusCallback, StatusEvent
from .protocol import (
    build_done_command,
    build_password_command,
    build_reboot_command,
    build_ssid_command,
    build_start_command,
)
from .transport import BleakTransport, BLETransport, ConnectionManager, ReliableWriter, RetryPolicy

_LOGGER = logging.getLogger(__name__)

TransportFactory = Callable[[ProvisioningConfig], BLETransport]


def _default_transport(config: ProvisioningConfig) -> BLETransport:
    return BleakTransport(adapter=config.adapter, timeout=config.connect_timeout)


def _to_bytes(value: str | bytes) -> bytes:
    return value.encode("utf-8") if isinstance(value, str) else bytes(value)


def _log_status(event: StatusEvent) -> None:
    _LOGGER.info("Device status: %s (%s)", event.name, event.hex)


class NetcfgDevice:
    """Wi-Fi provisioning over BLE for NETCFG devices.

    Main API for scanning, connecting and pushing credentials.

    Usage:
        async with NetcfgDevice(status_callback=print) as netcfg:
            devices = await netcfg.scan()
            target = next(d for d in devices if d.matched)
            await netcfg.connect(target.id)
            await netcfg.configure("MyWifi", "secret123")

    Only one peripheral is connected at a time. Commands are not serialized
    against each other; issue one command at a time.
    """

    def __init__(
            self,
            status_callback: StatusCallback | None = None,
            config: ProvisioningConfig | None = None,
            transport: BLETransport | None = None,
            transport_factory: TransportFactory = _default_transport,
    ):
        """Initialize provisioning device.

        Args:
            status_callback: Receives StatusEvents (default: log them)
            config: Timing configuration (default: ProvisioningConfig())
            transport: Ready-made transport (skips lazy adapter creation)
            transport_factory: Builds the transport on first use
        """
        self._config = config or ProvisioningConfig()
        self._status_callback = status_callback or _log_status
        self._transport_factory = transport_factory

        self._adapter_lock = asyncio.Lock()
        self._transport: BLETransport | None = None
        self._connection: ConnectionManager | None = None
        self._writer: ReliableWriter | None = None
        if transport is not None:
            self._attach(transport)

    async def __aenter__(self) -> NetcfgDevice:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Disconnect if still connected."""
        if self.is_connected:
            try:
                await self.disconnect()
            except NotConnectedError:
                pass

    @property
    def config(self) -> ProvisioningConfig:
        return self._config

    @property
    def state(self) -> ConnectionState:
        """Connection lifecycle state."""
        if self._connection is None:
            return ConnectionState.DISCONNECTED
        return self._connection.state

    @property
    def is_connected(self) -> bool:
        """Check whether a device has been connected and not disconnected."""
        return self.state == ConnectionState.READY

    @property
    def connected_device_id(self) -> str | None:
        """Identifier of the connected device, if any."""
        if self._connection is None:
            return None
        return self._connection.active_id

    def _attach(self, transport: BLETransport) -> None:
        self._transport = transport
        self._connection = ConnectionManager(transport, self._status_callback, self._config)
        self._writer = ReliableWriter(
            transport,
            RetryPolicy(
                max_attempts=self._config.write_attempts,
                delay=self._config.write_retry_delay,
            ),
            packet_interval=self._config.packet_interval,
        )

    async def _ensure_transport(self) -> BLETransport:
        """Create the adapter handle once and reuse it afterwards.

        Raises:
            AdapterNotFoundError: If no BLE adapter can be opened
        """
        async with self._adapter_lock:
            if self._transport is None:
                try:
                    transport = self._transport_factory(self._config)
                except Exception as e:
                    raise AdapterNotFoundError(f"No BLE adapters found: {e}") from e
                self._attach(transport)
                _LOGGER.debug("BLE adapter ready")
            return self._transport

    async def scan(self, timeout_ms: int | None = None) -> list[DeviceInfo]:
        """Scan for devices.

        Args:
            timeout_ms: Scan duration in milliseconds (default: config.scan_timeout_ms)

        Returns:
            All devices seen, strongest signal first
        """
        transport = await self._ensure_transport()
        if timeout_ms is None:
            timeout_ms = self._config.scan_timeout_ms
        return await discover_devices(transport, timeout_ms)

    async def connect(self, device_id: str) -> None:
        """Connect to a device and start listening for status events."""
        await self._ensure_transport()
        await self._connection.connect(device_id)

    async def disconnect(self) -> None:
        """Disconnect the connected device.

        Raises:
            NotConnectedError: If no device is connected
        """
        if self._connection is None:
            raise NotConnectedError("No device connected")
        await self._connection.disconnect()

    async def send_start(self) -> None:
        """Send START (0xA001)."""
        await self._send(build_start_command(), "START")

    async def send_ssid(self, ssid: str | bytes) -> None:
        """Send the network SSID (at most 36 bytes once encoded).

        Raises:
            PayloadTooLargeError: If the SSID is too long
        """
        await self._send(build_ssid_command(_to_bytes(ssid)), "SSID")

    async def send_password(self, password: str | bytes) -> None:
        """Send the network password (at most 64 bytes once encoded).

        Raises:
            PayloadTooLargeError: If the password is too long
        """
        await self._send(build_password_command(_to_bytes(password)), "PASSWORD")

    async def send_done(self) -> None:
        """Send DONE (0xA010)."""
        await self._send(build_done_command(), "DONE")

    async def send_reboot(self) -> None:
        """Send REBOOT (0xA011)."""
        await self._send(build_reboot_command(), "REBOOT")

    async def configure(self, ssid: str | bytes, password: str | bytes) -> None:
        """Run START, SSID, PASSWORD and DONE in sequence.

        Both arguments are validated before anything is sent. The sequence
        stops at the first failing step; steps already sent are not undone,
        the device's status events tell where it stands.

        Raises:
            PayloadTooLargeError: If ssid or password is too long
            NotConnectedError: If no device is connected
            BLEConnectionError: If a write fails after retries
        """
        steps = [
            ("START", build_start_command()),
            ("SSID", build_ssid_command(_to_bytes(ssid))),
            ("PASSWORD", build_password_command(_to_bytes(password))),
            ("DONE", build_done_command()),
        ]
        for label, packets in steps:
            await self._send(packets, label)
        _LOGGER.info("Wi-Fi configuration sent")

    async def _send(self, packets: list[bytes], label: str) -> None:
        if self._connection is None:
            raise NotConnectedError("No device connected")
        handle = await self._connection.get_active()

        _LOGGER.debug(
            "Sending %s to %s in %d packet(s)",
            label,
            handle.peripheral_id,
            len(packets),
        )
        await self._writer.write(handle.peripheral_id, handle.write_characteristic, packets)
        _LOGGER.info("%s sent", label)
