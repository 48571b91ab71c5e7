"""Playwright-backed driver that renders responses in a real browser.

Requests still go through the in-process MockSession; only rendering
happens in Chromium. Scripts embedded in the response run before the
document is read back, so queries see the DOM as a browser would after
load.
"""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup
from playwright.sync_api import Browser, Page, Playwright, sync_playwright
from starlette.types import ASGIApp

from integration_page.core.driver import BaseDriver
from integration_page.utils.config import PageConfig

logger = logging.getLogger(__name__)


class PlaywrightDriver(BaseDriver):
    """Driver that loads each response into a headless Chromium page.

    The rendered document is memoized per response object, so a new
    request can never be answered from a stale render. The driver
    therefore does not implement CacheInvalidatable.

    Attributes:
        headless: Whether to run the browser in headless mode.

    Example:
        >>> driver = PlaywrightDriver(app)
        >>> driver.visit("/")
        >>> driver.dom.select_one("#rendered-by-script")
        >>> driver.quit()
    """

    def __init__(self, app: ASGIApp, config: PageConfig | None = None) -> None:
        """Initialize the driver.

        The browser is not started until the first document query.

        Args:
            app: The ASGI application under test.
            config: Page configuration; headless and page_timeout apply.
        """
        super().__init__(app, config)
        self.headless = self.config.headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None
        self._page: Page | None = None
        self._rendered_for: httpx.Response | None = None
        self._rendered_dom: BeautifulSoup | None = None

    @property
    def is_launched(self) -> bool:
        return self._page is not None

    def launch(self) -> None:
        """Start Playwright, launch Chromium and open a page.

        Does nothing if the browser is already running.
        """
        if self._page is not None:
            return

        self._playwright = sync_playwright().start()
        self._browser = self._playwright.chromium.launch(headless=self.headless)
        self._page = self._browser.new_page()
        logger.info(f"Launched Chromium (headless={self.headless})")

    @property
    def dom(self) -> BeautifulSoup:
        """Document of the last response as rendered by the browser.

        Raises:
            NoResponseError: If no request has been made yet.
        """
        response = self.response
        if self._rendered_for is response and self._rendered_dom is not None:
            return self._rendered_dom

        self.launch()
        assert self._page is not None
        self._page.set_content(response.text, timeout=self.config.page_timeout)
        self._rendered_dom = BeautifulSoup(self._page.content(), self.config.parser)
        self._rendered_for = response
        return self._rendered_dom

    def quit(self) -> None:
        """Close the browser and clean up resources.

        Failures while closing the page or browser are logged and do not
        prevent Playwright from being stopped or the mock session from
        being closed.
        """
        if self._page is not None:
            try:
                self._page.close()
            except Exception as e:
                logger.warning(f"Error closing page: {e}")
        if self._browser is not None:
            try:
                self._browser.close()
            except Exception as e:
                logger.warning(f"Error closing browser: {e}")

        # Always stop playwright
        if self._playwright is not None:
            self._playwright.stop()

        # Reset internal state
        self._page = None
        self._browser = None
        self._playwright = None
        self._rendered_for = None
        self._rendered_dom = None

        super().quit()
