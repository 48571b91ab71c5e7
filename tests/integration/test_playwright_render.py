"""Rendering through a real Chromium instance.

Skipped when Playwright's browser is not installed.
"""

import pytest

from integration_page.core.extension import attach_page
from integration_page.core.session import IntegrationSession
from integration_page.testing import expect
from integration_page.utils.config import PageConfig


@pytest.fixture(scope="module")
def chromium_available() -> None:
    from playwright.sync_api import sync_playwright

    try:
        with sync_playwright() as playwright:
            playwright.chromium.launch(headless=True).close()
    except Exception as e:
        pytest.skip(f"Chromium not available: {e}")


@pytest.fixture
def browser_session(app, chromium_available):
    session = attach_page(
        IntegrationSession(app, config=PageConfig(default_driver="playwright"))
    )
    yield session
    session.close()


class TestPlaywrightRendering:
    """Scenarios that need a browser to execute scripts."""

    def test_scripts_run_before_queries(self, browser_session) -> None:
        browser_session.post(
            "/templates",
            data={
                "template": (
                    '<div id="target"></div>'
                    "<script>document.getElementById('target')"
                    ".textContent = 'Added by script';</script>"
                )
            },
        )

        expect(browser_session.page).to_have_text("Added by script")

    def test_clears_page_across_multiple_requests(self, browser_session) -> None:
        browser_session.post("/templates", data={"template": "<button>Request 1</button>"})
        expect(browser_session.page).to_have_button("Request 1")

        browser_session.post("/templates", data={"template": "<button>Request 2</button>"})
        expect(browser_session.page).to_have_button("Request 2")
        expect(browser_session.page).not_to_have_button("Request 1")
