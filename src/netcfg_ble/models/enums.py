from __future__ import annotations

from enum import IntEnum


class StatusCode(IntEnum):
    """Status codes notified by the provisioning firmware."""
    READY = 0x0100
    START = 0x0101
    INPROCESS = 0x0102
    CERT_READY = 0x0103
    SUCCESS = 0x0104
    REBOOTING = 0x0105
    IDLE = 0x0106
    SSID = 0x0107
    PWD = 0x0108
    CERT_ERR = 0x0109
    ERROR = 0x010A


class ConnectionState(IntEnum):
    """Lifecycle of the active peripheral connection."""
    DISCONNECTED = 0
    CONNECTING = 1
    SERVICE_DISCOVERY = 2
    READY = 3
