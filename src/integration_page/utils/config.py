"""Configuration management for integration_page."""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

from integration_page.utils.exceptions import ConfigurationError

SUPPORTED_PARSERS = ("html.parser", "lxml", "html5lib")

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


@dataclass
class PageConfig:
    """Page and driver configuration."""

    default_driver: str = "asgi_test"
    host: str = "testserver"
    scheme: str = "http"
    parser: str = "html.parser"
    follow_redirects: bool = True
    raise_server_exceptions: bool = True
    headless: bool = True
    page_timeout: int = 30000  # ms
    exact: bool = False

    @property
    def base_url(self) -> str:
        """Base URL the test client sends requests to."""
        return f"{self.scheme}://{self.host}"


class ConfigLoader:
    """Loads configuration from environment variables."""

    @staticmethod
    def load() -> PageConfig:
        """Load configuration from environment.

        Every setting is optional; unset variables fall back to the
        PageConfig defaults.

        Raises:
            ConfigurationError: If a value is present but invalid.
        """
        load_dotenv()  # Load .env file if present

        parser = os.environ.get("INTEGRATION_PAGE_PARSER", "html.parser")
        if parser not in SUPPORTED_PARSERS:
            raise ConfigurationError(
                f"Invalid value for INTEGRATION_PAGE_PARSER: '{parser}' "
                f"(expected one of {', '.join(SUPPORTED_PARSERS)})"
            )

        scheme = os.environ.get("INTEGRATION_PAGE_SCHEME", "http")
        if scheme not in ("http", "https"):
            raise ConfigurationError(
                f"Invalid value for INTEGRATION_PAGE_SCHEME: '{scheme}'"
            )

        return PageConfig(
            default_driver=os.environ.get("INTEGRATION_PAGE_DRIVER", "asgi_test"),
            host=os.environ.get("INTEGRATION_PAGE_HOST", "testserver"),
            scheme=scheme,
            parser=parser,
            follow_redirects=ConfigLoader._get_bool_env(
                "INTEGRATION_PAGE_FOLLOW_REDIRECTS", True
            ),
            raise_server_exceptions=ConfigLoader._get_bool_env(
                "INTEGRATION_PAGE_RAISE_SERVER_EXCEPTIONS", True
            ),
            headless=ConfigLoader._get_bool_env("INTEGRATION_PAGE_HEADLESS", True),
            page_timeout=ConfigLoader._get_int_env("INTEGRATION_PAGE_TIMEOUT", 30000),
            exact=ConfigLoader._get_bool_env("INTEGRATION_PAGE_EXACT", False),
        )

    @staticmethod
    def _get_int_env(name: str, default: int) -> int:
        """Get an integer environment variable.

        Args:
            name: The environment variable name.
            default: The default value if not set.

        Returns:
            The integer value.

        Raises:
            ConfigurationError: If the value is not a valid integer.
        """
        value = os.environ.get(name)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError as e:
            raise ConfigurationError(
                f"Invalid value for {name}: '{value}' is not a valid integer"
            ) from e

    @staticmethod
    def _get_bool_env(name: str, default: bool) -> bool:
        """Get a boolean environment variable.

        Accepts 1/0, true/false, yes/no and on/off, case-insensitively.

        Raises:
            ConfigurationError: If the value is not a recognised boolean.
        """
        value = os.environ.get(name)
        if value is None:
            return default
        normalized = value.strip().lower()
        if normalized in _TRUE_VALUES:
            return True
        if normalized in _FALSE_VALUES:
            return False
        raise ConfigurationError(
            f"Invalid value for {name}: '{value}' is not a valid boolean"
        )
