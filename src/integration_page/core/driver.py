"""In-process drivers backed by the FastAPI/Starlette test client.

The MockSession captures the request/response pair of every call made
against the application. BaseDriver layers navigation helpers on top of
it, and ASGITestDriver parses the last response with BeautifulSoup,
caching the parsed document until the response changes or the cache is
reset.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx
from bs4 import BeautifulSoup
from fastapi.testclient import TestClient
from starlette.types import ASGIApp

from integration_page.core.protocols import CacheInvalidatable
from integration_page.utils.config import PageConfig
from integration_page.utils.exceptions import NoResponseError

logger = logging.getLogger(__name__)


class MockSession:
    """Request/response capture around a TestClient.

    Cookies persist across requests for the lifetime of the session,
    the same way a browser keeps them between page loads.

    Attributes:
        last_response: The most recent response, or None before any request.
    """

    def __init__(
        self,
        app: ASGIApp,
        base_url: str = "http://testserver",
        follow_redirects: bool = True,
        raise_server_exceptions: bool = True,
    ) -> None:
        self._client = TestClient(
            app,
            base_url=base_url,
            follow_redirects=follow_redirects,
            raise_server_exceptions=raise_server_exceptions,
        )
        self.last_response: httpx.Response | None = None

    @property
    def last_request(self) -> httpx.Request | None:
        """The request that produced last_response."""
        if self.last_response is None:
            return None
        return self.last_response.request

    @property
    def cookies(self) -> httpx.Cookies:
        return self._client.cookies

    def request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request to the application and record the response.

        Args:
            method: HTTP method.
            url: Path or absolute URL.
            **kwargs: Options forwarded to TestClient.request().

        Returns:
            The response.
        """
        response = self._client.request(method, url, **kwargs)
        self.last_response = response
        return response

    def close(self) -> None:
        self._client.close()


class BaseDriver(ABC):
    """Common request handling for drivers.

    Subclasses provide the dom property and may hook _before_request()
    to invalidate whatever they derive from the previous response.
    """

    def __init__(self, app: ASGIApp, config: PageConfig | None = None) -> None:
        """Initialize the driver.

        Args:
            app: The ASGI application under test.
            config: Page configuration. Defaults to PageConfig().
        """
        self.app = app
        self.config = config or PageConfig()
        self._mock_session: MockSession | None = None

    @property
    def mock_session(self) -> MockSession:
        """Lazily created MockSession bound to the application."""
        if self._mock_session is None:
            self._mock_session = MockSession(
                self.app,
                base_url=self.config.base_url,
                follow_redirects=self.config.follow_redirects,
                raise_server_exceptions=self.config.raise_server_exceptions,
            )
        return self._mock_session

    def _before_request(self) -> None:
        """Hook run before every request issued through process()."""

    def process(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        self._before_request()
        logger.debug(f"{type(self).__name__} {method.upper()} {path}")
        return self.mock_session.request(method.upper(), path, **kwargs)

    def visit(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("GET", path, **kwargs)

    @property
    def response(self) -> httpx.Response:
        """The last response.

        Raises:
            NoResponseError: If no request has been made yet.
        """
        response = self.mock_session.last_response
        if response is None:
            raise NoResponseError(
                "No request has been made yet; there is no document to query"
            )
        return response

    @property
    def html(self) -> str:
        return self.response.text

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def current_url(self) -> str:
        return str(self.response.url)

    @property
    def current_path(self) -> str:
        return self.response.url.path

    @property
    def response_headers(self) -> httpx.Headers:
        return self.response.headers

    @property
    @abstractmethod
    def dom(self) -> BeautifulSoup:
        """Document of the last response."""

    def quit(self) -> None:
        """Close the mock session, if one was created."""
        if self._mock_session is not None:
            self._mock_session.close()
            self._mock_session = None


class ASGITestDriver(BaseDriver, CacheInvalidatable):
    """Driver that parses responses in process with BeautifulSoup.

    The parsed document is memoized per response object. Form helpers on
    the page mutate that parsed document, so it survives until a new
    response is recorded, whoever sent the request, or until
    reset_cache() discards it.

    Example:
        >>> driver = ASGITestDriver(app)
        >>> driver.visit("/")
        >>> driver.dom.select_one("h1").get_text()
    """

    def __init__(self, app: ASGIApp, config: PageConfig | None = None) -> None:
        super().__init__(app, config)
        self._dom: BeautifulSoup | None = None
        self._parsed_for: httpx.Response | None = None

    @property
    def dom(self) -> BeautifulSoup:
        """Parsed document of the last response.

        Raises:
            NoResponseError: If no request has been made yet.
        """
        response = self.response
        if self._dom is None or self._parsed_for is not response:
            self._dom = BeautifulSoup(response.text, self.config.parser)
            self._parsed_for = response
        return self._dom

    def reset_cache(self) -> None:
        if self._dom is not None:
            logger.debug("Discarding cached document")
        self._dom = None
        self._parsed_for = None

    def _before_request(self) -> None:
        self.reset_cache()
