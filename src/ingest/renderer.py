"""Page rendering collaborator.

This module defines the contract the acquisition gate consumes and a
Playwright-backed implementation driving headless Chromium. Each run
gets its own browser context so cached responses never leak between
runs sharing one browser.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import Any, Protocol

from playwright.async_api import Error as PlaywrightError
from playwright.async_api import async_playwright

from core.constants import BROWSER_LAUNCH_ARGS
from core.errors import AcquisitionError
from core.logging_config import get_logger
from core.types import RawGrid

_LOGGER = get_logger(__name__)

_READ_TABLE_SCRIPT = """
(selector) => {
  let best = [];
  for (const table of document.querySelectorAll(selector)) {
    const rows = Array.from(table.querySelectorAll('tbody tr')).map(
      (tr) => Array.from(tr.querySelectorAll('td')).map((td) => td.innerText.trim())
    );
    if (rows.length > best.length) {
      best = rows;
    }
  }
  return { rows: best, pageText: document.body ? document.body.innerText : '' };
}
"""
_SCROLL_SCRIPT = "() => window.scrollTo(0, document.body.scrollHeight)"


class ReadySignal:
    """Awaitable marker set once the page reports its data refresh finished."""

    def __init__(self) -> None:
        self._event = asyncio.Event()

    def set(self) -> None:
        self._event.set()

    def is_set(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> None:
        """Suspend until the signal is set."""
        await self._event.wait()


class Renderer(Protocol):
    """Operations the acquisition layer needs from a page renderer."""

    async def establish_session(self) -> Any:
        """Start a rendering session and return its handle."""

    def is_alive(self, session: Any) -> bool:
        """Return whether the session can still render pages."""

    async def subscribe_ready_signal(self, session: Any, marker: str) -> ReadySignal:
        """Open a page for this run and watch it for the ready marker."""

    async def navigate(self, session: Any, url: str, timeout_seconds: float) -> None:
        """Load the url in the run's page."""

    async def read_table_grid(self, session: Any, table_selector: str) -> RawGrid:
        """Read body cell text of the largest matching table."""

    async def close_page(self, session: Any) -> None:
        """Release the run's page, keeping the session alive."""

    async def dispose_session(self, session: Any) -> None:
        """Shut the session down."""


@dataclass
class PlaywrightSession:
    """Live Playwright driver, browser, and the current run's page."""

    playwright: Any
    browser: Any
    page: Any | None = None


class PlaywrightRenderer:
    """Renderer backed by Playwright's async Chromium driver."""

    def __init__(
        self,
        headless: bool = True,
        launch_args: tuple[str, ...] = BROWSER_LAUNCH_ARGS,
    ) -> None:
        self._headless = headless
        self._launch_args = launch_args

    async def establish_session(self) -> PlaywrightSession:
        """Launch Chromium.

        Returns:
            Session wrapping the driver and browser.

        Raises:
            PlaywrightError: If the driver or browser fails to start.
        """
        playwright = await async_playwright().start()
        try:
            browser = await playwright.chromium.launch(
                headless=self._headless,
                args=list(self._launch_args),
            )
        except PlaywrightError:
            await playwright.stop()
            raise
        _LOGGER.info("browser_launched", headless=self._headless)
        return PlaywrightSession(playwright=playwright, browser=browser)

    def is_alive(self, session: PlaywrightSession) -> bool:
        return bool(session.browser.is_connected())

    async def subscribe_ready_signal(self, session: PlaywrightSession, marker: str) -> ReadySignal:
        page = await self._ensure_page(session)
        signal = ReadySignal()

        def _on_console(message: Any) -> None:
            if marker in message.text:
                signal.set()

        page.on("console", _on_console)
        return signal

    async def navigate(self, session: PlaywrightSession, url: str, timeout_seconds: float) -> None:
        """Load a page and scroll to the bottom to trigger lazy content.

        Raises:
            AcquisitionError: If navigation fails or times out.
        """
        page = await self._ensure_page(session)
        _LOGGER.info("page_navigate", url=url, timeout_seconds=timeout_seconds)
        try:
            await page.goto(url, timeout=timeout_seconds * 1000, wait_until="networkidle")
            await page.evaluate(_SCROLL_SCRIPT)
        except PlaywrightError as error:
            raise AcquisitionError(
                f"Failed to load {url}: {error}. "
                "Check network access to the source page and retry."
            ) from error

    async def read_table_grid(self, session: PlaywrightSession, table_selector: str) -> RawGrid:
        """Read the rendered table.

        Raises:
            AcquisitionError: If the page cannot be evaluated.
        """
        page = await self._ensure_page(session)
        try:
            payload = await page.evaluate(_READ_TABLE_SCRIPT, table_selector)
        except PlaywrightError as error:
            raise AcquisitionError(
                f"Failed to read table '{table_selector}' from rendered page: {error}."
            ) from error
        return RawGrid.from_rows(payload.get("rows", []), str(payload.get("pageText", "")))

    async def close_page(self, session: PlaywrightSession) -> None:
        page = session.page
        session.page = None
        if page is None:
            return
        try:
            await page.context.close()
        except PlaywrightError as error:
            _LOGGER.warning("page_close_failed", error=str(error))

    async def dispose_session(self, session: PlaywrightSession) -> None:
        await self.close_page(session)
        try:
            await session.browser.close()
        except PlaywrightError as error:
            _LOGGER.warning("browser_close_failed", error=str(error))
        await session.playwright.stop()
        _LOGGER.info("browser_closed")

    async def _ensure_page(self, session: PlaywrightSession) -> Any:
        if session.page is None:
            try:
                context = await session.browser.new_context()
                session.page = await context.new_page()
            except PlaywrightError as error:
                raise AcquisitionError(
                    f"Failed to open a page in the browser session: {error}."
                ) from error
        return session.page
