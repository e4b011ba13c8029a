"""Provisioning timing and transport configuration."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class ProvisioningConfig:
    """Tunable timings for connection and packet delivery.

    The defaults were chosen empirically against real devices; none of them
    is mandated by the wire protocol.

    Attributes:
        connect_attempts: Connect attempts before giving up (default: 3)
        connect_backoff: Delay between failed connect attempts in seconds (default: 0.5).
            Not applied after the last attempt.
        connect_timeout: Per-attempt connect timeout in seconds (default: 10)
        settle_delay: Pause after service discovery in seconds (default: 0.2)
        write_attempts: Attempts per packet, including the first (default: 3)
        write_retry_delay: Delay between failed packet writes in seconds (default: 0.1).
            Not applied after the last attempt, so a packet that fails every
            attempt costs (write_attempts - 1) delays.
        packet_interval: Pause after each sent packet in seconds (default: 0.1)
        scan_timeout_ms: Default scan duration in milliseconds (default: 3000)
        adapter: Local adapter name for the Bleak transport, e.g. "hci0"
    """

    connect_attempts: int = 3
    connect_backoff: float = 0.5
    connect_timeout: float = 10.0
    settle_delay: float = 0.2
    write_attempts: int = 3
    write_retry_delay: float = 0.1
    packet_interval: float = 0.1
    scan_timeout_ms: int = 3000
    adapter: str | None = None

    def __post_init__(self) -> None:
        if self.connect_attempts < 1:
            raise ValueError(f"connect_attempts must be >= 1, got {self.connect_attempts}")
        if self.write_attempts < 1:
            raise ValueError(f"write_attempts must be >= 1, got {self.write_attempts}")
        for name in (
            "connect_backoff",
            "connect_timeout",
            "settle_delay",
            "write_retry_delay",
            "packet_interval",
            "scan_timeout_ms",
        ):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must not be negative")
