"""Integration test session for ASGI applications.

An IntegrationSession drives the application in process, one request at
a time, and remembers the last exchange so tests can inspect it. It is
the object PageSessionExtension wraps.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

import httpx
from starlette.types import ASGIApp

from integration_page.core.driver import MockSession
from integration_page.utils.config import PageConfig
from integration_page.utils.exceptions import NoResponseError, RedirectError

logger = logging.getLogger(__name__)

MockSessionProvider = Callable[[], MockSession]


class RequestMethods(ABC):
    """HTTP verb helpers routed through ``self.process``."""

    @abstractmethod
    def process(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Perform a request and return its response."""

    def get(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("GET", path, **kwargs)

    def post(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("POST", path, **kwargs)

    def put(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("PUT", path, **kwargs)

    def patch(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("PATCH", path, **kwargs)

    def delete(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("DELETE", path, **kwargs)

    def head(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("HEAD", path, **kwargs)

    def options(self, path: str, **kwargs: Any) -> httpx.Response:
        return self.process("OPTIONS", path, **kwargs)


class IntegrationSession(RequestMethods):
    """One test case's conversation with the application.

    Requests are sent through a MockSession. By default the session owns
    one; a provider installed with use_mock_session() replaces it, which
    is how a page driver gets to see every response.

    Attributes:
        app: The ASGI application under test.
        config: Page configuration.
    """

    def __init__(self, app: ASGIApp, config: PageConfig | None = None) -> None:
        self.app = app
        self.config = config or PageConfig()
        self._mock_session: MockSession | None = None
        self._mock_session_provider: MockSessionProvider | None = None

    def use_mock_session(self, provider: MockSessionProvider | None) -> None:
        """Route all future requests through the MockSession provider returns.

        Passing None goes back to the session's own MockSession.
        """
        self._mock_session_provider = provider

    @property
    def mock_session(self) -> MockSession:
        if self._mock_session_provider is not None:
            return self._mock_session_provider()
        if self._mock_session is None:
            self._mock_session = MockSession(
                self.app,
                base_url=self.config.base_url,
                follow_redirects=self.config.follow_redirects,
                raise_server_exceptions=self.config.raise_server_exceptions,
            )
        return self._mock_session

    def process(
        self,
        method: str,
        path: str,
        *,
        params: Any = None,
        data: Any = None,
        json: Any = None,
        content: Any = None,
        headers: Any = None,
        cookies: Any = None,
        files: Any = None,
        follow_redirects: bool | None = None,
    ) -> httpx.Response:
        """Perform a request against the application.

        Args:
            method: HTTP method.
            path: Path or absolute URL.
            params: Query parameters.
            data: Form fields.
            json: JSON body.
            content: Raw body.
            headers: Request headers.
            cookies: Extra cookies for this request.
            files: Multipart file uploads.
            follow_redirects: Override the configured redirect policy.

        Returns:
            The response. It is also available as ``self.response``.
        """
        options = {
            "params": params,
            "data": data,
            "json": json,
            "content": content,
            "headers": headers,
            "cookies": cookies,
            "files": files,
            "follow_redirects": follow_redirects,
        }
        options = {key: value for key, value in options.items() if value is not None}

        logger.debug(f"{method.upper()} {path}")
        response = self.mock_session.request(method.upper(), path, **options)
        logger.debug(f"{method.upper()} {path} -> {response.status_code}")
        return response

    @property
    def response(self) -> httpx.Response:
        """The last response.

        Raises:
            NoResponseError: If no request has been made yet.
        """
        response = self.mock_session.last_response
        if response is None:
            raise NoResponseError("No request has been made yet")
        return response

    @property
    def request(self) -> httpx.Request:
        return self.response.request

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def path(self) -> str:
        return self.response.url.path

    @property
    def is_redirect(self) -> bool:
        return self.response.is_redirect

    @property
    def redirect_location(self) -> str:
        """Location header of the last response.

        Raises:
            RedirectError: If the last response is not a redirect.
        """
        if not self.is_redirect:
            raise RedirectError(
                f"Last response was not a redirect (status {self.status_code})"
            )
        return self.response.headers["location"]

    def follow_redirect(self, **kwargs: Any) -> httpx.Response:
        """Request the Location of the last (redirect) response.

        Raises:
            RedirectError: If the last response is not a redirect.
        """
        return self.get(self.redirect_location, **kwargs)

    def close(self) -> None:
        if self._mock_session is not None:
            self._mock_session.close()
            self._mock_session = None
