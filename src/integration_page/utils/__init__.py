"""Utilities module for integration_page."""

from .config import ConfigLoader, PageConfig
from .exceptions import (
    AmbiguousMatch,
    ConfigurationError,
    DriverNotRegistered,
    ElementNotFound,
    ExpectationNotMet,
    IntegrationPageError,
    NoResponseError,
    RedirectError,
)

__all__ = [
    "AmbiguousMatch",
    "ConfigLoader",
    "ConfigurationError",
    "DriverNotRegistered",
    "ElementNotFound",
    "ExpectationNotMet",
    "IntegrationPageError",
    "NoResponseError",
    "PageConfig",
    "RedirectError",
]
