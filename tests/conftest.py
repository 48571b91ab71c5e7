"""Shared pytest fixtures for integration_page tests.

The page-aware fixtures (integration_session, page, within) come from
integration_page.testing.pytest_plugin; this module supplies the ``app``
they need plus a fixed configuration so the environment cannot leak in.
"""

from collections.abc import Callable, Iterator

import pytest
from fastapi import FastAPI

from integration_page.core.page import Page
from integration_page.testing.pytest_plugin import (  # noqa: F401
    integration_session,
    page,
    within,
)
from integration_page.utils.config import PageConfig
from tests.dummy.app import create_app


@pytest.fixture
def app() -> FastAPI:
    """Fresh dummy application."""
    return create_app()


@pytest.fixture
def page_config() -> PageConfig:
    """Default configuration, independent of the environment."""
    return PageConfig()


@pytest.fixture
def render(app: FastAPI, page_config: PageConfig) -> Iterator[Callable[[str], Page]]:
    """Factory that POSTs a template to the dummy app and returns the Page.

    Pages created through the factory are quit after the test.
    """
    pages: list[Page] = []

    def _render(template: str) -> Page:
        page = Page(app, config=page_config)
        pages.append(page)
        page.driver.process("POST", "/templates", data={"template": template})
        return page

    yield _render

    for page in pages:
        page.quit()


@pytest.fixture
def index_page(app: FastAPI, page_config: PageConfig) -> Iterator[Page]:
    """Page that has visited the dummy app's index."""
    page = Page(app, config=page_config)
    page.visit("/")
    yield page
    page.quit()
