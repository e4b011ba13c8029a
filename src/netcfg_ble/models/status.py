"""Provisioning status event model."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Callable

STATUS_EVENT_CHANNEL = "netcfg_status"


@dataclass(frozen=True)
class StatusEvent:
    """Lifecycle event decoded from a status notification.

    Attributes:
        code: 16-bit status code (0 for synthetic diagnostic events)
        name: Human-readable status name, "UNKNOWN" if unrecognized
        hex: Canonical "0xNNNN" form of code, or error text for NOTIFY_ERROR
    """

    code: int
    name: str
    hex: str

    def to_dict(self) -> dict[str, int | str]:
        """Mapping sent over the host event channel."""
        return asdict(self)


StatusCallback = Callable[[StatusEvent], None]
