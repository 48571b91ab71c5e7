"""Page matchers and DOM scoping for in-process ASGI integration tests."""

from integration_page.core import (
    CacheInvalidatable,
    Element,
    IntegrationSession,
    Page,
    PageSessionExtension,
    attach_page,
    register_driver,
)
from integration_page.testing.assertions import PageAssertions, expect
from integration_page.utils import ConfigLoader, PageConfig

__version__ = "0.1.0"

__all__ = [
    "CacheInvalidatable",
    "ConfigLoader",
    "Element",
    "IntegrationSession",
    "Page",
    "PageAssertions",
    "PageConfig",
    "PageSessionExtension",
    "attach_page",
    "expect",
    "register_driver",
]
