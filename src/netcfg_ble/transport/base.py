"""BLE transport interface consumed by the provisioning engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import AsyncIterator, Protocol

from ..models.advertisement import PeripheralProperties

# GATT property names as reported by Bleak
PROP_WRITE = "write"
PROP_WRITE_WITHOUT_RESPONSE = "write-without-response"
PROP_NOTIFY = "notify"
PROP_INDICATE = "indicate"
PROP_READ = "read"


@dataclass(frozen=True)
class GattCharacteristic:
    """Characteristic UUID and its advertised properties."""

    uuid: str
    properties: frozenset[str] = frozenset()

    @property
    def can_write(self) -> bool:
        return PROP_WRITE in self.properties or self.can_write_without_response

    @property
    def can_write_without_response(self) -> bool:
        return PROP_WRITE_WITHOUT_RESPONSE in self.properties

    @property
    def can_notify(self) -> bool:
        return PROP_NOTIFY in self.properties or PROP_INDICATE in self.properties

    @property
    def can_read(self) -> bool:
        return PROP_READ in self.properties


@dataclass(frozen=True)
class GattService:
    """Discovered GATT service."""

    uuid: str
    characteristics: list[GattCharacteristic] = field(default_factory=list)


@dataclass(frozen=True)
class Notification:
    """Value pushed by a subscribed characteristic."""

    uuid: str
    value: bytes


class BLETransport(Protocol):
    """Primitives a platform BLE stack must provide.

    Failures are raised as NetcfgError subclasses; transient ones as
    BLEConnectionError so that callers can retry them.
    """

    async def start_scan(self) -> None: ...

    async def stop_scan(self) -> None: ...

    async def peripherals(self) -> list[str]: ...

    async def properties(self, peripheral_id: str) -> PeripheralProperties | None: ...

    async def connect(self, peripheral_id: str) -> None: ...

    async def is_connected(self, peripheral_id: str) -> bool: ...

    async def disconnect(self, peripheral_id: str) -> None: ...

    async def discover_services(self, peripheral_id: str) -> list[GattService]: ...

    async def write(
        self, peripheral_id: str, uuid: str, data: bytes, response: bool
    ) -> None: ...

    async def subscribe(self, peripheral_id: str, uuid: str) -> None: ...

    async def notifications(self, peripheral_id: str) -> AsyncIterator[Notification]:
        """Open the notification stream; the iterator ends on disconnect."""
        ...
