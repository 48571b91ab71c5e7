"""Core module for integration_page.

This module exports the drivers, the document handle and the session
types used to drive an application in process.
"""

from integration_page.core.browser import PlaywrightDriver
from integration_page.core.driver import ASGITestDriver, BaseDriver, MockSession
from integration_page.core.extension import PageSessionExtension, attach_page
from integration_page.core.page import Element, Page
from integration_page.core.protocols import CacheInvalidatable, DriverProtocol
from integration_page.core.registry import (
    available_drivers,
    create_driver,
    register_driver,
)
from integration_page.core.session import IntegrationSession, RequestMethods

__all__ = [
    "ASGITestDriver",
    "BaseDriver",
    "CacheInvalidatable",
    "DriverProtocol",
    "Element",
    "IntegrationSession",
    "MockSession",
    "Page",
    "PageSessionExtension",
    "PlaywrightDriver",
    "RequestMethods",
    "attach_page",
    "available_drivers",
    "create_driver",
    "register_driver",
]
