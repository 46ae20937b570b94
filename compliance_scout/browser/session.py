"""
Browser session management for one pipeline run.
Each BrowserSession owns an isolated Playwright driver, browser and
context; pages are opened from the shared context so cookie and consent
state carry across every page load in the run.
"""

from __future__ import annotations

from playwright import async_api

from compliance_scout.utils import logger

log = logger.create_logger("BrowserSession")

# ============================================================================
# Constants
# ============================================================================

LAUNCH_TIMEOUT_MS = 30_000
LAUNCH_ARGS = [
    "--disable-gpu",
    "--disable-dev-shm-usage",
    "--disable-setuid-sandbox",
    "--no-sandbox",
]


class BrowserSession:
    """
    Manages an isolated browser session for a single discovery run.
    """

    def __init__(self, *, headless: bool = True) -> None:
        """Initialise a new browser session with no browser running yet."""
        self._headless = headless
        self._playwright: async_api.Playwright | None = None
        self._browser: async_api.Browser | None = None
        self._context: async_api.BrowserContext | None = None
        self._open_pages = 0

    @property
    def is_active(self) -> bool:
        """Whether a browser context is ready for new pages."""
        return self._context is not None

    @property
    def open_page_count(self) -> int:
        """Number of pages opened through this session and not yet closed."""
        return self._open_pages

    # ==========================================================================
    # Browser Lifecycle
    # ==========================================================================

    async def launch_browser(self) -> None:
        """Launch headless Chromium and create the shared browser context."""
        if self._context is not None:
            return

        log.info("Launching browser", {"headless": self._headless})
        pw = await async_api.async_playwright().start()
        self._playwright = pw
        try:
            self._browser = await pw.chromium.launch(
                headless=self._headless,
                timeout=LAUNCH_TIMEOUT_MS,
                args=LAUNCH_ARGS,
            )
            self._context = await self._browser.new_context(
                locale="en-GB",
                java_script_enabled=True,
            )
        except Exception:
            await self.close()
            raise
        log.debug("Browser launched")

    async def new_page(self) -> async_api.Page:
        """Open a new page in the shared context.

        The caller owns the page and must release it via :meth:`close_page`.
        """
        if self._context is None:
            raise RuntimeError("No browser session active")
        page = await self._context.new_page()
        self._open_pages += 1
        return page

    async def close_page(self, page: async_api.Page) -> None:
        """Close a page opened by :meth:`new_page`; close errors are non-fatal."""
        self._open_pages = max(0, self._open_pages - 1)
        try:
            await page.close()
        except Exception as exc:
            log.debug("Page close error (non-fatal)", {"error": str(exc)})

    # ==========================================================================
    # Cleanup
    # ==========================================================================

    async def close(self) -> None:
        """Close the browser and clean up all resources."""
        log.debug("Closing browser session")
        if self._context:
            try:
                await self._context.close()
            except Exception as exc:
                log.debug("Context close error (non-fatal)", {"error": str(exc)})
            self._context = None

        if self._browser:
            try:
                await self._browser.close()
            except Exception as exc:
                log.debug("Browser close error (non-fatal)", {"error": str(exc)})
            self._browser = None

        if self._playwright:
            try:
                await self._playwright.stop()
            except Exception as exc:
                log.debug("Playwright stop error (non-fatal)", {"error": str(exc)})
            self._playwright = None

        self._open_pages = 0
        log.debug("Browser session closed")
