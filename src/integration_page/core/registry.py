"""Registry of named drivers available to pages."""

from __future__ import annotations

import logging
from collections.abc import Callable

from starlette.types import ASGIApp

from integration_page.core.browser import PlaywrightDriver
from integration_page.core.driver import ASGITestDriver
from integration_page.core.protocols import DriverProtocol
from integration_page.utils.config import PageConfig
from integration_page.utils.exceptions import DriverNotRegistered

logger = logging.getLogger(__name__)

DriverFactory = Callable[[ASGIApp, PageConfig], DriverProtocol]

# Registry of all drivers, keyed by name
DRIVER_REGISTRY: dict[str, DriverFactory] = {
    "asgi_test": ASGITestDriver,
    "playwright": PlaywrightDriver,
}


def register_driver(name: str, factory: DriverFactory) -> None:
    """Register a driver factory under name.

    Registering an existing name replaces the previous factory.

    Args:
        name: The name pages use to select the driver.
        factory: Callable taking (app, config) and returning a driver.
    """
    if name in DRIVER_REGISTRY:
        logger.debug(f"Replacing driver '{name}'")
    DRIVER_REGISTRY[name] = factory


def available_drivers() -> list[str]:
    """Get the names of all registered drivers, sorted alphabetically."""
    return sorted(DRIVER_REGISTRY)


def create_driver(name: str, app: ASGIApp, config: PageConfig) -> DriverProtocol:
    """Build a new driver instance bound to app.

    Args:
        name: Registered driver name.
        app: The ASGI application under test.
        config: Page configuration passed to the factory.

    Returns:
        A fresh driver.

    Raises:
        DriverNotRegistered: If no driver is registered under name.
    """
    factory = DRIVER_REGISTRY.get(name)
    if factory is None:
        raise DriverNotRegistered(name, available_drivers())
    logger.debug(f"Creating '{name}' driver")
    return factory(app, config)
