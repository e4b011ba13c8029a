"""Data models for NETCFG provisioning."""

from .advertisement import (
    DeviceInfo,
    PeripheralProperties,
    contains_marker,
    is_provisioning_target,
    matches_device_name,
)
from .config import ProvisioningConfig
from .enums import ConnectionState, StatusCode
from .status import STATUS_EVENT_CHANNEL, StatusCallback, StatusEvent

__all__ = [
    "ConnectionState",
    "DeviceInfo",
    "PeripheralProperties",
    "ProvisioningConfig",
    "STATUS_EVENT_CHANNEL",
    "StatusCallback",
    "StatusCode",
    "StatusEvent",
    "contains_marker",
    "is_provisioning_target",
    "matches_device_name",
]
