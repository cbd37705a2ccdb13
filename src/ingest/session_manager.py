"""Rendering session lifecycle.

This module owns the one browser session shared across runs. A lock
serializes runs so two triggers never drive the same session at once,
and a dead or missing session is re-established before it is handed
out.
"""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator

from core.errors import AcquisitionError
from core.logging_config import get_logger
from core.retry import RetryPolicy, Sleeper
from ingest.renderer import Renderer

_LOGGER = get_logger(__name__)


class SessionManager:
    """Create, health-check, and dispose the shared rendering session."""

    def __init__(
        self,
        renderer: Renderer,
        retry_policy: RetryPolicy | None = None,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._renderer = renderer
        self._retry_policy = retry_policy or RetryPolicy()
        self._sleep = sleep
        self._session: Any | None = None
        self._lock = asyncio.Lock()

    @asynccontextmanager
    async def lease(self) -> AsyncIterator[Any]:
        """Hold the session exclusively for one run.

        Yields:
            A live session handle.

        Raises:
            AcquisitionError: If the session cannot be established.
        """
        async with self._lock:
            yield await self._ensure_session()

    def is_alive(self) -> bool:
        """Return whether a live session is currently held."""
        return self._session is not None and self._renderer.is_alive(self._session)

    async def warm_up(self) -> bool:
        """Establish the session ahead of the first run.

        Returns:
            True when a live session is ready; failures are logged only.
        """
        try:
            async with self.lease():
                return True
        except AcquisitionError as error:
            _LOGGER.error("session_warm_up_failed", error=str(error))
            return False

    async def dispose(self) -> None:
        """Shut the held session down, if any."""
        async with self._lock:
            await self._discard()

    async def _ensure_session(self) -> Any:
        if self._session is not None:
            if self._renderer.is_alive(self._session):
                return self._session
            _LOGGER.warning("session_dead")
            await self._discard()
        try:
            session = await self._retry_policy.run(
                self._renderer.establish_session,
                label="session_establish",
                sleep=self._sleep,
            )
        except Exception as error:
            raise AcquisitionError(
                f"Failed to establish rendering session after "
                f"{self._retry_policy.max_attempts} attempts: {error}. "
                "Check that the browser runtime is installed and retry."
            ) from error
        self._session = session
        _LOGGER.info("session_established")
        return session

    async def _discard(self) -> None:
        session = self._session
        self._session = None
        if session is None:
            return
        try:
            await self._renderer.dispose_session(session)
        except Exception as error:
            _LOGGER.warning("session_dispose_failed", error=str(error))
