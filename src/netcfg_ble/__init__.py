"""NETCFG BLE Provisioning Package.

  Pure Python package for provisioning Wi-Fi credentials on NETCFG devices over BLE.
  """

from .device import NetcfgDevice
from .discovery import discover_devices
from .exceptions import (
    AdapterNotFoundError,
    BLEConnectionError,
    BLETimeoutError,
    BLEWriteError,
    DeviceNotFoundError,
    NetcfgError,
    NotConnectedError,
    PayloadTooLargeError,
    ProtocolError,
    ServiceNotFoundError,
)
from .models.advertisement import (
    DeviceInfo,
    PeripheralProperties,
    is_provisioning_target,
)
from .models.config import ProvisioningConfig
from .models.enums import ConnectionState, StatusCode
from .models.status import STATUS_EVENT_CHANNEL, StatusEvent
from .protocol import (
    PREFIX_ID,
    SERVICE_UUID,
    STATUS_UUID,
    WRITE_UUID,
    Opcode,
    encode,
    parse_status_notification,
)
from .transport import BleakTransport, BLETransport

__version__ = "0.1.0"

__all__ = [
    # Main API
    "NetcfgDevice",
    "discover_devices",
    # Exceptions
    "NetcfgError",
    "AdapterNotFoundError",
    "DeviceNotFoundError",
    "NotConnectedError",
    "ServiceNotFoundError",
    "PayloadTooLargeError",
    "BLEConnectionError",
    "BLEWriteError",
    "BLETimeoutError",
    "ProtocolError",
    # Models
    "DeviceInfo",
    "PeripheralProperties",
    "ProvisioningConfig",
    "StatusEvent",
    # Enums
    "ConnectionState",
    "Opcode",
    "StatusCode",
    # Transport
    "BLETransport",
    "BleakTransport",
    # Utilities
    "encode",
    "parse_status_notification",
    "is_provisioning_target",
    # Constants
    "SERVICE_UUID",
    "WRITE_UUID",
    "STATUS_UUID",
    "PREFIX_ID",
    "STATUS_EVENT_CHANNEL",
]
