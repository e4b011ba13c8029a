"""Exceptions raised by the NETCFG provisioning package."""

from __future__ import annotations


class NetcfgError(Exception):
    """Base error for all NETCFG provisioning failures."""


class AdapterNotFoundError(NetcfgError):
    """Raised when no local BLE adapter is available."""


class DeviceNotFoundError(NetcfgError):
    """Raised when the requested peripheral is unknown to the adapter."""


class NotConnectedError(NetcfgError):
    """Raised when a command needs a connection and none is active."""


class ServiceNotFoundError(NetcfgError):
    """Raised when the provisioning service or a characteristic is missing."""


class PayloadTooLargeError(NetcfgError, ValueError):
    """Raised when an SSID or password exceeds its byte limit."""


class BLEConnectionError(NetcfgError):
    """Transient BLE transport failure (connect, subscribe, read)."""


class BLEWriteError(BLEConnectionError):
    """Raised when a GATT write fails."""


class BLETimeoutError(BLEConnectionError):
    """Raised when a BLE operation times out."""


class ProtocolError(NetcfgError):
    """Raised when a message cannot be framed for the wire."""
