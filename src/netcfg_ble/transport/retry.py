"""Bounded retry with a fixed delay."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from ..exceptions import BLEConnectionError

_LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Retry an async operation a fixed number of times.

    Attributes:
        max_attempts: Total attempts, including the first
        delay: Seconds to wait between failed attempts
        retry_on: Exception types treated as transient
    """

    max_attempts: int = 3
    delay: float = 0.1
    retry_on: tuple[type[BaseException], ...] = (BLEConnectionError,)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError(f"max_attempts must be >= 1, got {self.max_attempts}")

    def is_retryable(self, error: BaseException) -> bool:
        return isinstance(error, self.retry_on)

    async def run(self, operation: Callable[[], Awaitable[T]], description: str = "operation") -> T:
        """Run operation until it succeeds or attempts are exhausted.

        Non-retryable errors propagate immediately. After the last attempt
        the last error is raised unchanged.
        """
        attempt = 1
        while True:
            try:
                return await operation()
            except Exception as e:
                if not self.is_retryable(e) or attempt >= self.max_attempts:
                    raise
                _LOGGER.warning(
                    "%s failed (attempt %d/%d): %s",
                    description,
                    attempt,
                    self.max_attempts,
                    e,
                )
            await asyncio.sleep(self.delay)
            attempt += 1
