"""Page assertions in two styles.

PageAssertions is a mixin for unittest.TestCase subclasses that expose a
``page`` attribute; failures raise ``self.failureException``.

``expect(page)`` returns a PageExpectation for plain pytest tests;
failures raise ExpectationNotMet, which is an AssertionError.
"""

from __future__ import annotations

import re
from typing import Any

from integration_page.core.page import Page, TextQuery
from integration_page.utils.exceptions import ExpectationNotMet


def _describe(kind: str, locator: object) -> str:
    if locator is None:
        return kind
    if isinstance(locator, re.Pattern):
        return f"{kind} matching /{locator.pattern}/"
    return f'{kind} "{locator}"'


def _text_message(page: Page, text: TextQuery, negate: bool) -> str:
    verb = "not to find" if negate else "to find"
    return f'expected {verb} {_describe("text", text)} in "{page.text}"'


def _find_message(kind: str, locator: object, negate: bool) -> str:
    if negate:
        return f"expected not to find {_describe(kind, locator)}, but there were matches"
    return f"expected to find {_describe(kind, locator)} but there were no matches"


def _path_message(page: Page, path: TextQuery) -> str:
    return f"expected {page.current_path!r} to equal {_describe('path', path)}"


class PageAssertions:
    """Assertion methods for test cases with a ``page`` attribute."""

    page: Page

    def _page_failure(self, message: str) -> None:
        raise getattr(self, "failureException", AssertionError)(message)

    def assert_selector(self, selector: str, **options: Any) -> None:
        if not self.page.has_css(selector, **options):
            self._page_failure(_find_message("css", selector, negate=False))

    def assert_no_selector(self, selector: str, **options: Any) -> None:
        if not self.page.has_no_css(selector, **options):
            self._page_failure(_find_message("css", selector, negate=True))

    def assert_button(self, locator: str | None = None, **options: Any) -> None:
        if not self.page.has_button(locator, **options):
            self._page_failure(_find_message("button", locator, negate=False))

    def assert_no_button(self, locator: str | None = None, **options: Any) -> None:
        if not self.page.has_no_button(locator, **options):
            self._page_failure(_find_message("button", locator, negate=True))

    def assert_link(self, locator: str | None = None, **options: Any) -> None:
        if not self.page.has_link(locator, **options):
            self._page_failure(_find_message("link", locator, negate=False))

    def assert_no_link(self, locator: str | None = None, **options: Any) -> None:
        if not self.page.has_no_link(locator, **options):
            self._page_failure(_find_message("link", locator, negate=True))

    def assert_field(self, locator: str | None = None, **options: Any) -> None:
        if not self.page.has_field(locator, **options):
            self._page_failure(_find_message("field", locator, negate=False))

    def assert_no_field(self, locator: str | None = None, **options: Any) -> None:
        if not self.page.has_no_field(locator, **options):
            self._page_failure(_find_message("field", locator, negate=True))

    def assert_text(self, text: TextQuery) -> None:
        if not self.page.has_text(text):
            self._page_failure(_text_message(self.page, text, negate=False))

    def assert_no_text(self, text: TextQuery) -> None:
        if not self.page.has_no_text(text):
            self._page_failure(_text_message(self.page, text, negate=True))

    def assert_current_path(self, path: TextQuery) -> None:
        if not self.page.has_current_path(path):
            self._page_failure(_path_message(self.page, path))


class PageExpectation:
    """Expectations about a page.

    Example:
        >>> expect(page).to_have_button("Save")
        >>> expect(page).not_to_have_text("Error")
    """

    def __init__(self, page: Page) -> None:
        self.page = page

    def _check(self, matched: bool, message: str) -> None:
        if not matched:
            raise ExpectationNotMet(message)

    def to_have_css(self, selector: str, **options: Any) -> None:
        self._check(
            self.page.has_css(selector, **options),
            _find_message("css", selector, negate=False),
        )

    def not_to_have_css(self, selector: str, **options: Any) -> None:
        self._check(
            self.page.has_no_css(selector, **options),
            _find_message("css", selector, negate=True),
        )

    to_have_selector = to_have_css
    not_to_have_selector = not_to_have_css

    def to_have_button(self, locator: str | None = None, **options: Any) -> None:
        self._check(
            self.page.has_button(locator, **options),
            _find_message("button", locator, negate=False),
        )

    def not_to_have_button(self, locator: str | None = None, **options: Any) -> None:
        self._check(
            self.page.has_no_button(locator, **options),
            _find_message("button", locator, negate=True),
        )

    def to_have_link(self, locator: str | None = None, **options: Any) -> None:
        self._check(
            self.page.has_link(locator, **options),
            _find_message("link", locator, negate=False),
        )

    def not_to_have_link(self, locator: str | None = None, **options: Any) -> None:
        self._check(
            self.page.has_no_link(locator, **options),
            _find_message("link", locator, negate=True),
        )

    def to_have_field(self, locator: str | None = None, **options: Any) -> None:
        self._check(
            self.page.has_field(locator, **options),
            _find_message("field", locator, negate=False),
        )

    def not_to_have_field(self, locator: str | None = None, **options: Any) -> None:
        self._check(
            self.page.has_no_field(locator, **options),
            _find_message("field", locator, negate=True),
        )

    def to_have_text(self, text: TextQuery) -> None:
        self._check(
            self.page.has_text(text), _text_message(self.page, text, negate=False)
        )

    def not_to_have_text(self, text: TextQuery) -> None:
        self._check(
            self.page.has_no_text(text), _text_message(self.page, text, negate=True)
        )

    def to_have_current_path(self, path: TextQuery) -> None:
        self._check(self.page.has_current_path(path), _path_message(self.page, path))


def expect(page: Page) -> PageExpectation:
    """Start an expectation about page."""
    return PageExpectation(page)
