"""BLE transport layer."""

from .base import BLETransport, GattCharacteristic, GattService, Notification
from .bleak_transport import BleakTransport
from .connection import ConnectionManager, PeripheralHandle, find_characteristics
from .listener import StatusListener
from .retry import RetryPolicy
from .writer import ReliableWriter

__all__ = [
    "BLETransport",
    "BleakTransport",
    "ConnectionManager",
    "GattCharacteristic",
    "GattService",
    "Notification",
    "PeripheralHandle",
    "ReliableWriter",
    "RetryPolicy",
    "StatusListener",
    "find_characteristics",
]
