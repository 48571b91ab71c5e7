"""Page support for integration sessions.

PageSessionExtension wraps an IntegrationSession so that requests go
through the page driver's mock session, the page's cached document is
discarded before each request, and ``page``/``within`` are available on
the session.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx

from integration_page.core.driver import MockSession
from integration_page.core.page import Element, Page
from integration_page.core.protocols import CacheInvalidatable
from integration_page.core.session import IntegrationSession, RequestMethods

logger = logging.getLogger(__name__)


class PageSessionExtension(RequestMethods):
    """Forwarding wrapper that gives an IntegrationSession a page.

    Attributes not defined here are forwarded to the wrapped session, so
    the extension can be used wherever the session was.

    Example:
        >>> session = attach_page(IntegrationSession(app))
        >>> session.post("/templates", data={"template": "<h1>Hi</h1>"})
        >>> session.page.has_text("Hi")
        True
    """

    def __init__(self, session: IntegrationSession, driver: str | None = None) -> None:
        """Wrap session.

        Args:
            session: The session to extend.
            driver: Registered driver name for the page. Defaults to the
                session config's default_driver.
        """
        self._session = session
        self._driver_name = driver
        self._page: Page | None = None
        self._mock_session: MockSession | None = None
        session.use_mock_session(lambda: self.mock_session)

    @property
    def session(self) -> IntegrationSession:
        return self._session

    def process(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Reset the page's document cache, then perform the request."""
        if self._page is not None and isinstance(self._page.driver, CacheInvalidatable):
            logger.debug("Resetting page cache before request")
            self._page.driver.reset_cache()
        return self._session.process(method, path, **kwargs)

    def follow_redirect(self, **kwargs: Any) -> httpx.Response:
        """Follow the last redirect through this extension's process()."""
        return self.get(self._session.redirect_location, **kwargs)

    @property
    def page(self) -> Page:
        """The session's page, created on first access."""
        if self._page is None:
            self._page = Page(
                self._session.app,
                driver=self._driver_name,
                config=self._session.config,
            )
        return self._page

    @property
    def mock_session(self) -> MockSession:
        """The page driver's mock session, memoized."""
        if self._mock_session is None:
            self._mock_session = self.page.driver.mock_session
        return self._mock_session

    @contextmanager
    def within(self, selector: str | Element) -> Iterator[Element]:
        with self.page.within(selector) as element:
            yield element

    def close(self) -> None:
        """Quit the page, if one was created, and close the wrapped session.

        The wrapped session stops routing through the page driver, so later
        requests on it use its own MockSession.
        """
        self._session.use_mock_session(None)
        if self._page is not None:
            self._page.quit()
            self._page = None
        self._mock_session = None
        self._session.close()

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        return getattr(self._session, name)


def attach_page(
    session: IntegrationSession, driver: str | None = None
) -> PageSessionExtension:
    """Extend session with page support.

    Args:
        session: The session to extend.
        driver: Registered driver name. Defaults to the configured driver.

    Returns:
        The extended session; use it in place of session.
    """
    return PageSessionExtension(session, driver=driver)
