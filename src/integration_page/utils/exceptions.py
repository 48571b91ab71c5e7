"""Exception hierarchy for integration_page."""


class IntegrationPageError(Exception):
    """Base exception for all integration_page errors."""


class ConfigurationError(IntegrationPageError):
    """Invalid or missing configuration."""


class DriverNotRegistered(ConfigurationError):  # noqa: N818
    """No driver is registered under the requested name.

    Raised by the driver registry when a page is built with a driver
    name that was never registered.
    """

    def __init__(self, name: str, available: list[str]) -> None:
        """Initialize DriverNotRegistered with the requested name.

        Args:
            name: The driver name that could not be resolved.
            available: Names of the drivers that are registered.
        """
        self.name = name
        self.available = available
        super().__init__(
            f"No driver registered as '{name}'. "
            f"Available drivers: {', '.join(available) or 'none'}"
        )


class NoResponseError(IntegrationPageError):
    """The document was queried before any request was made."""


class RedirectError(IntegrationPageError):
    """follow_redirect() was called but the last response is not a redirect."""


class ElementNotFound(IntegrationPageError):  # noqa: N818
    """No element in the current scope matches the query."""


class AmbiguousMatch(IntegrationPageError):  # noqa: N818
    """More than one element matches a query that expects exactly one."""


class ExpectationNotMet(IntegrationPageError, AssertionError):  # noqa: N818
    """A page expectation failed.

    Subclasses AssertionError so test runners report it as a failure
    rather than an error.
    """
