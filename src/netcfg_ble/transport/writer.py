"""Ordered, retrying packet delivery."""

from __future__ import annotations

import asyncio
import logging
from typing import Sequence

from .base import BLETransport, GattCharacteristic
from .retry import RetryPolicy

_LOGGER = logging.getLogger(__name__)


class ReliableWriter:
    """Writes one message's packets to the write characteristic.

    Packets go out strictly in order. Each packet is retried per the retry
    policy; a packet that still fails aborts the message. Every successful
    write is followed by a fixed pause so the firmware can keep up.
    """

    def __init__(
            self,
            transport: BLETransport,
            retry_policy: RetryPolicy | None = None,
            packet_interval: float = 0.1,
    ):
        """Initialize writer.

        Args:
            transport: BLE transport used for GATT writes
            retry_policy: Per-packet retry policy (default: 3 attempts, 100ms apart)
            packet_interval: Pause after each sent packet in seconds (default: 0.1)
        """
        self._transport = transport
        self._retry_policy = retry_policy or RetryPolicy(max_attempts=3, delay=0.1)
        self._packet_interval = packet_interval

    async def write(
            self,
            peripheral_id: str,
            characteristic: GattCharacteristic,
            packets: Sequence[bytes],
    ) -> None:
        """Send packets in order.

        Args:
            peripheral_id: Connected peripheral
            characteristic: Resolved write characteristic
            packets: Wire packets of one message

        Raises:
            BLEConnectionError: Last transport error once retries are exhausted
        """
        # Prefer write-without-response when the firmware allows it
        response = not characteristic.can_write_without_response

        for number, packet in enumerate(packets, start=1):
            await self._retry_policy.run(
                lambda packet=packet: self._transport.write(
                    peripheral_id, characteristic.uuid, packet, response
                ),
                description=f"Write of packet {number}/{len(packets)}",
            )
            _LOGGER.debug(
                "Sent packet %d/%d (%d bytes)",
                number,
                len(packets),
                len(packet),
            )
            await asyncio.sleep(self._packet_interval)
