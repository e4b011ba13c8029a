"""Background consumer of the status notification stream."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..exceptions import NetcfgError
from ..models.status import StatusCallback, StatusEvent
from ..protocol import decode_notification
from .base import BLETransport

_LOGGER = logging.getLogger(__name__)

NOTIFY_ERROR = "NOTIFY_ERROR"


class StatusListener:
    """Decodes status notifications of one connection into StatusEvents.

    Runs detached from any caller and reports only through the callback.
    Ends when the stream closes or when stopped by the connection manager.
    When the stream ends on its own, on_closed is awaited once.
    """

    def __init__(
            self,
            transport: BLETransport,
            peripheral_id: str,
            callback: StatusCallback,
            on_closed: Callable[[], Awaitable[None]] | None = None,
    ):
        self._transport = transport
        self._peripheral_id = peripheral_id
        self._callback = callback
        self._on_closed = on_closed
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> asyncio.Task[None]:
        """Spawn the listener task on the running loop."""
        if self._task is None:
            self._task = asyncio.create_task(
                self.run(), name=f"netcfg-status-{self._peripheral_id}"
            )
        return self._task

    async def stop(self) -> None:
        """Cancel the listener task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None or task.done():
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass

    async def run(self) -> None:
        """Consume notifications until the stream ends."""
        try:
            stream = await self._transport.notifications(self._peripheral_id)
        except NetcfgError as e:
            _LOGGER.warning("Could not open notification stream: %s", e)
            self._emit(StatusEvent(code=0, name=NOTIFY_ERROR, hex=str(e)))
            return

        _LOGGER.debug("Listening for status notifications from %s", self._peripheral_id)
        try:
            async for notification in stream:
                event = decode_notification(notification.uuid, notification.value)
                if event is None:
                    continue
                _LOGGER.debug("Status %s (%s)", event.name, event.hex)
                self._emit(event)
        except NetcfgError as e:
            _LOGGER.warning("Notification stream from %s failed: %s", self._peripheral_id, e)
        except Exception:
            _LOGGER.exception("Notification stream from %s failed", self._peripheral_id)
        else:
            _LOGGER.debug("Notification stream from %s closed", self._peripheral_id)

        if self._on_closed is not None:
            await self._on_closed()

    def _emit(self, event: StatusEvent) -> None:
        try:
            self._callback(event)
        except Exception:
            _LOGGER.exception("Status callback failed for %s", event.name)
