"""unittest base class for page-aware integration tests."""

from __future__ import annotations

import unittest
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

import httpx
from starlette.types import ASGIApp

from integration_page.core.extension import PageSessionExtension, attach_page
from integration_page.core.page import Element, Page
from integration_page.core.session import IntegrationSession, RequestMethods
from integration_page.testing.assertions import PageAssertions
from integration_page.utils.config import ConfigLoader
from integration_page.utils.exceptions import ConfigurationError


class IntegrationTestCase(PageAssertions, RequestMethods, unittest.TestCase):
    """Test case with an integration session and page per test.

    Set ``app`` on the subclass, or override create_app(). Set ``driver``
    to use a driver other than the configured default.

    Example:
        >>> class TemplatesTest(IntegrationTestCase):
        ...     app = create_app()
        ...
        ...     def test_renders_button(self):
        ...         self.post("/templates", data={"template": "<button>Go</button>"})
        ...         self.assert_button("Go")
    """

    app: ASGIApp | None = None
    driver: str | None = None

    integration_session: PageSessionExtension

    def create_app(self) -> ASGIApp:
        """Return the application under test.

        Raises:
            ConfigurationError: If no app is configured.
        """
        if self.app is None:
            raise ConfigurationError(
                f"{type(self).__name__} must set 'app' or override create_app()"
            )
        return self.app

    def setUp(self) -> None:
        super().setUp()
        session = IntegrationSession(self.create_app(), config=ConfigLoader.load())
        self.integration_session = attach_page(session, driver=self.driver)
        self.addCleanup(self.integration_session.close)

    def process(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        return self.integration_session.process(method, path, **kwargs)

    @property
    def page(self) -> Page:
        return self.integration_session.page

    @property
    def response(self) -> httpx.Response:
        return self.integration_session.response

    @contextmanager
    def within(self, selector: str | Element) -> Iterator[Element]:
        with self.integration_session.within(selector) as element:
            yield element
