"""Core protocols for integration_page.

This module defines the interfaces the rest of the package depends on:
- DriverProtocol for the engines that execute requests and expose the
  last-rendered document
- CacheInvalidatable, the opt-in capability for drivers that memoize
  their parsed document
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    import httpx
    from bs4 import BeautifulSoup

    from integration_page.core.driver import MockSession


class CacheInvalidatable(ABC):
    """Capability for drivers that cache their parsed document.

    Drivers opt in by inheriting from this class. The session extension
    checks for it with isinstance() before each request and clears the
    cache so that the next document query reflects the latest response.
    """

    @abstractmethod
    def reset_cache(self) -> None:
        """Discard any memoized document state."""


class DriverProtocol(Protocol):
    """Protocol defining the driver interface.

    A driver executes HTTP calls against the application under test and
    exposes the resulting document for structural queries.
    """

    @property
    def mock_session(self) -> MockSession:
        """Low-level request/response capture used by this driver."""
        ...

    def process(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        """Execute a request and record its response.

        Args:
            method: HTTP method (GET, POST, ...).
            path: Path or absolute URL to request.
            **kwargs: Options forwarded to the underlying client.

        Returns:
            The response.
        """
        ...

    def visit(self, path: str, **kwargs: Any) -> httpx.Response:
        """Issue a GET request for path."""
        ...

    @property
    def html(self) -> str:
        """Body of the last response."""
        ...

    @property
    def dom(self) -> BeautifulSoup:
        """Parsed document of the last response."""
        ...

    @property
    def status_code(self) -> int:
        """Status code of the last response."""
        ...

    @property
    def current_url(self) -> str:
        """URL of the last response."""
        ...

    @property
    def current_path(self) -> str:
        """Path component of current_url."""
        ...

    @property
    def response_headers(self) -> httpx.Headers:
        """Headers of the last response."""
        ...

    def quit(self) -> None:
        """Release resources held by the driver."""
        ...
