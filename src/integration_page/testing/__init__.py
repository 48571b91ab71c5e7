"""Test-framework integrations for integration_page."""

from integration_page.testing.assertions import (
    PageAssertions,
    PageExpectation,
    expect,
)
from integration_page.testing.case import IntegrationTestCase

__all__ = [
    "IntegrationTestCase",
    "PageAssertions",
    "PageExpectation",
    "expect",
]
