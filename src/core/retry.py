"""Bounded fixed-delay retry policy.

This module provides the retry primitive used for rendering session
establishment. The policy is a plain value; it keeps no state between
independent invocations.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

from core.constants import DEFAULT_RETRY_DELAY_SECONDS, DEFAULT_RETRY_MAX_ATTEMPTS
from core.errors import ConfigError
from core.logging_config import get_logger

_LOGGER = get_logger(__name__)

T = TypeVar("T")
Sleeper = Callable[[float], Awaitable[None]]


@dataclass(frozen=True)
class RetryPolicy:
    """Retry configuration.

    Attributes:
        max_attempts: Total attempts including the first one.
        delay_seconds: Fixed wait between a failed attempt and the next.
    """

    max_attempts: int = DEFAULT_RETRY_MAX_ATTEMPTS
    delay_seconds: float = DEFAULT_RETRY_DELAY_SECONDS

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ConfigError(
                f"Invalid retry max_attempts {self.max_attempts}: expected at least 1."
            )
        if self.delay_seconds < 0:
            raise ConfigError(
                f"Invalid retry delay_seconds {self.delay_seconds}: expected non-negative."
            )

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        label: str = "operation",
        sleep: Sleeper = asyncio.sleep,
    ) -> T:
        """Invoke ``operation`` until it succeeds or attempts run out.

        Args:
            operation: Zero-argument coroutine factory.
            label: Name used in log events.
            sleep: Awaitable sleep function, replaceable in tests.

        Returns:
            The first successful operation result.

        Raises:
            Exception: The final attempt's error, unchanged.
        """
        for attempt in range(1, self.max_attempts + 1):
            _LOGGER.info("retry_attempt", label=label, attempt=attempt)
            try:
                return await operation()
            except Exception as error:
                _LOGGER.warning(
                    "retry_attempt_failed",
                    label=label,
                    attempt=attempt,
                    max_attempts=self.max_attempts,
                    error=str(error),
                )
                if attempt == self.max_attempts:
                    raise
            await sleep(self.delay_seconds)
        raise AssertionError("unreachable: retry loop exited without result")
