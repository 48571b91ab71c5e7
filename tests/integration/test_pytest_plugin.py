"""The pytest fixtures with configuration read from the environment.

Importing page_config here overrides the fixed configuration from
tests/conftest.py for this module only.
"""

import pytest

from integration_page.core.extension import PageSessionExtension
from integration_page.testing import expect
from integration_page.testing.pytest_plugin import page_config  # noqa: F401
from integration_page.utils.config import PageConfig


@pytest.fixture(autouse=True)
def page_environment(monkeypatch) -> None:
    monkeypatch.setenv("INTEGRATION_PAGE_HOST", "example.test")
    monkeypatch.setenv("INTEGRATION_PAGE_FOLLOW_REDIRECTS", "false")
    monkeypatch.setenv("INTEGRATION_PAGE_EXACT", "true")


class TestEnvironmentConfig:
    """Tests for the plugin's page_config fixture."""

    def test_loads_environment(self, request) -> None:
        config = request.getfixturevalue("page_config")
        assert isinstance(config, PageConfig)
        assert config.host == "example.test"
        assert config.follow_redirects is False
        assert config.exact is True

    def test_session_uses_loaded_config(
        self, integration_session: PageSessionExtension, request
    ) -> None:
        assert integration_session.config is request.getfixturevalue("page_config")

        integration_session.get("/redirect")

        assert integration_session.status_code == 302
        assert str(integration_session.response.url) == "http://example.test/redirect"

    def test_page_uses_loaded_config(self, integration_session, page) -> None:
        integration_session.post(
            "/templates", data={"template": "<button>Save draft</button>"}
        )

        expect(page).to_have_button("Save draft")
        expect(page).not_to_have_button("Save")
