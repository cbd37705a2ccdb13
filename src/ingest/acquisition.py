"""Acquisition gate.

This module turns a live rendering session into a raw table grid:
render the source page, wait a bounded time for the page's ready
signal, and read the table. A missing ready signal is not fatal; the
gate waits a fixed grace period and reads whatever has rendered.
"""

from __future__ import annotations

import asyncio
from typing import Any

from core.logging_config import get_logger
from core.retry import Sleeper
from core.source_profile import SourceProfile
from core.types import RawGrid
from ingest.renderer import ReadySignal, Renderer

_LOGGER = get_logger(__name__)


class AcquisitionGate:
    """Render the profile's page and read its table."""

    def __init__(
        self,
        renderer: Renderer,
        profile: SourceProfile,
        sleep: Sleeper = asyncio.sleep,
    ) -> None:
        self._renderer = renderer
        self._profile = profile
        self._sleep = sleep

    async def acquire(self, session: Any) -> RawGrid:
        """Render the source page and return its raw grid.

        Args:
            session: Live session handle from the session manager.

        Returns:
            Raw grid with cell text and page text.

        Raises:
            AcquisitionError: If navigation or table reading fails.
        """
        profile = self._profile
        try:
            signal = await self._renderer.subscribe_ready_signal(session, profile.ready_marker)
            await self._renderer.navigate(
                session, profile.url, profile.navigation_timeout_seconds
            )
            ready = await wait_for_ready(
                signal,
                profile.ready_budget_seconds,
                profile.ready_poll_interval_seconds,
                self._sleep,
            )
            if ready:
                _LOGGER.info("ready_signal_received", url=profile.url)
            else:
                _LOGGER.warning(
                    "ready_signal_missing",
                    url=profile.url,
                    grace_seconds=profile.grace_seconds,
                )
                await self._sleep(profile.grace_seconds)
            grid = await self._renderer.read_table_grid(session, profile.table_selector)
        finally:
            await self._renderer.close_page(session)
        _LOGGER.info("table_read", row_count=len(grid.rows))
        return grid


async def wait_for_ready(
    signal: ReadySignal,
    budget_seconds: float,
    interval_seconds: float,
    sleep: Sleeper = asyncio.sleep,
) -> bool:
    """Poll the ready signal until it is set or the budget is spent.

    Args:
        signal: Signal resolved by the renderer.
        budget_seconds: Total time to wait.
        interval_seconds: Wait between polls.
        sleep: Awaitable sleep function, replaceable in tests.

    Returns:
        True when the signal arrived within budget.
    """
    if signal.is_set():
        return True
    if budget_seconds <= 0:
        return False
    step = interval_seconds if interval_seconds > 0 else budget_seconds
    polls = max(1, round(budget_seconds / step))
    for _ in range(polls):
        await sleep(step)
        if signal.is_set():
            return True
    return False
