"""Browser session controller: one browser, one context, one page per run.

The controller launches Chromium itself unless the caller hands in an
existing ``Browser``. Ownership decides who closes it: a launched browser
is closed here exactly once, a supplied one is never closed here.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from playwright.async_api import Error as PlaywrightError

from gsearch.browser.stealth import (
    apply_context_stealth,
    apply_page_stealth,
    build_context_options,
    build_launch_options,
)
from gsearch.models.fingerprint import DEFAULT_DEVICE_NAME

if TYPE_CHECKING:
    from playwright.async_api import Browser, BrowserContext, Page, Playwright

    from gsearch.models.fingerprint import FingerprintProfile
    from gsearch.settings.config import BrowserSettings

logger = logging.getLogger(__name__)


class BrowserSession:
    """Manages the browser lifecycle and the single browsing context of a search run.

    Args:
        playwright: A started ``Playwright`` instance (launcher and device registry).
        browser: An externally managed browser to reuse instead of launching one.
        browser_settings: Channel/executable/proxy overrides for launches.
    """

    def __init__(
        self,
        playwright: Playwright,
        *,
        browser: Browser | None = None,
        browser_settings: BrowserSettings | None = None,
    ) -> None:
        self._playwright = playwright
        self._browser: Browser | None = browser
        self._browser_settings = browser_settings
        self.browser_supplied = browser is not None
        self.owns_browser = False
        self._context: BrowserContext | None = None
        self._page: Page | None = None

    @property
    def browser(self) -> Browser | None:
        return self._browser

    @property
    def context(self) -> BrowserContext | None:
        return self._context

    @property
    def page(self) -> Page | None:
        return self._page

    @property
    def can_relaunch(self) -> bool:
        """Whether this session may close and relaunch the browser in another mode."""
        return not self.browser_supplied

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    async def launch(self, *, headless: bool, timeout_ms: int) -> Browser:
        """Return the session's browser, launching Chromium if none is attached."""
        if self._browser is not None:
            if self.browser_supplied:
                logger.info("Using existing browser instance")
            return self._browser

        logger.info("Launching browser in %s mode", "headless" if headless else "headed")
        options = build_launch_options(
            headless=headless,
            timeout_ms=timeout_ms,
            browser_settings=self._browser_settings,
        )
        self._browser = await self._playwright.chromium.launch(**options)
        self.owns_browser = True
        logger.info("Browser launched")
        return self._browser

    async def new_context(
        self,
        profile: FingerprintProfile,
        storage_state_path: str | Path | None = None,
    ) -> BrowserContext:
        """Create the browsing context with *profile* applied and stealth scripts injected.

        Args:
            profile: Fingerprint applied on top of the desktop device descriptor.
            storage_state_path: Saved cookies/storage to restore, if the file exists.

        Raises:
            RuntimeError: If called before :meth:`launch`.
        """
        if self._browser is None:
            raise RuntimeError("launch() must be called before new_context()")

        device = self._playwright.devices[DEFAULT_DEVICE_NAME]
        options = build_context_options(device, profile, storage_state_path)
        if "storage_state" in options:
            logger.info("Restoring saved browser state from %s", options["storage_state"])

        self._context = await self._browser.new_context(**options)
        await apply_context_stealth(self._context)
        return self._context

    async def new_page(self) -> Page:
        """Open the run's page with the screen patch applied."""
        if self._context is None:
            raise RuntimeError("new_context() must be called before new_page()")
        self._page = await self._context.new_page()
        await apply_page_stealth(self._page)
        return self._page

    async def close_context(self) -> None:
        """Close the page and context. Errors are logged, not raised."""
        page, context = self._page, self._context
        self._page = None
        self._context = None
        if page is not None:
            try:
                await page.close()
            except PlaywrightError as exc:
                logger.warning("Error closing page (non-fatal): %s", exc)
        if context is not None:
            try:
                await context.close()
            except PlaywrightError as exc:
                logger.warning("Error closing context (non-fatal): %s", exc)

    async def close(self) -> None:
        """Close the context and, if this session launched it, the browser.

        Safe to call repeatedly; a launched browser is closed at most once and
        a supplied browser is left running.
        """
        await self.close_context()
        if not self.owns_browser or self._browser is None:
            return
        browser = self._browser
        self._browser = None
        self.owns_browser = False
        try:
            await browser.close()
            logger.info("Browser closed")
        except PlaywrightError as exc:
            logger.error("Error closing browser: %s", exc)
