"""Document handle for querying and interacting with the current response.

A Page binds a driver to the application under test and answers
structural queries (finders and matchers) against the driver's current
document. Queries only consider content a user could see: elements in
the document head, scripts, styles, hidden inputs and anything marked
hidden or styled ``display: none`` are ignored.

All queries are relative to the current scope, which starts as the whole
document and is narrowed with ``within()``. Scopes given as selectors are
found again when a new response replaces the document; scopes given as
Elements belong to the document they were found in.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterator
from contextlib import contextmanager
from urllib.parse import urldefrag, urljoin, urlsplit, urlunsplit

import httpx
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString
from starlette.types import ASGIApp

from integration_page.core.protocols import DriverProtocol
from integration_page.core.registry import create_driver
from integration_page.utils.config import PageConfig
from integration_page.utils.exceptions import AmbiguousMatch, ElementNotFound

logger = logging.getLogger(__name__)

INVISIBLE_TAGS = frozenset(
    {"head", "script", "style", "template", "noscript", "title"}
)

BLOCK_TAGS = frozenset(
    {
        "address", "article", "aside", "blockquote", "br", "dd", "details",
        "dialog", "div", "dl", "dt", "fieldset", "figcaption", "figure",
        "footer", "form", "h1", "h2", "h3", "h4", "h5", "h6", "header", "hr",
        "li", "main", "nav", "ol", "p", "pre", "section", "summary", "table",
        "tbody", "td", "tfoot", "th", "thead", "tr", "ul",
    }
)

BUTTON_SELECTOR = (
    "button, input[type=submit], input[type=reset], "
    "input[type=button], input[type=image]"
)
FIELD_SELECTOR = "input, textarea, select"
LINK_SELECTOR = "a[href]"

# Input types that are never matched as fillable fields
NON_FIELD_INPUT_TYPES = frozenset({"submit", "reset", "button", "image", "hidden"})

_DISPLAY_NONE = re.compile(r"display\s*:\s*none", re.IGNORECASE)

TextQuery = str | re.Pattern[str]


def normalize_whitespace(text: str) -> str:
    """Collapse runs of whitespace into single spaces and strip the ends."""
    return " ".join(text.split())


def _input_type(tag: Tag) -> str:
    return str(tag.get("type") or "text").lower()


def _is_hidden(tag: Tag) -> bool:
    if tag.name in INVISIBLE_TAGS or tag.has_attr("hidden"):
        return True
    if tag.name == "input" and _input_type(tag) == "hidden":
        return True
    style = tag.get("style")
    return bool(style and _DISPLAY_NONE.search(str(style)))


def is_displayed(tag: Tag) -> bool:
    """Return True if neither tag nor any of its ancestors is hidden."""
    node: Tag | None = tag
    while node is not None:
        if _is_hidden(node):
            return False
        node = node.parent
    return True


def visible_text(tag: Tag) -> str:
    """Concatenate the visible text below tag, without normalization.

    Block-level elements are padded with spaces so adjacent blocks do not
    run together once whitespace is collapsed.
    """
    parts: list[str] = []
    for child in tag.children:
        if isinstance(child, Tag):
            if _is_hidden(child):
                continue
            text = visible_text(child)
            if child.name in BLOCK_TAGS:
                text = f" {text} "
            parts.append(text)
        elif isinstance(child, NavigableString) and not isinstance(
            child, PreformattedString
        ):
            parts.append(str(child))
    return "".join(parts)


def _text_matches(content: str, text: TextQuery) -> bool:
    if isinstance(text, re.Pattern):
        return text.search(content) is not None
    return normalize_whitespace(text) in content


def _locator_matches(value: object, locator: str, exact: bool) -> bool:
    if value is None:
        return False
    normalized = normalize_whitespace(str(value))
    locator = normalize_whitespace(locator)
    if exact:
        return normalized == locator
    return locator in normalized


def _is_disabled(tag: Tag) -> bool:
    if tag.has_attr("disabled"):
        return True
    fieldset = tag.find_parent("fieldset")
    return fieldset is not None and fieldset.has_attr("disabled")


def _field_value(tag: Tag) -> str:
    if tag.name == "textarea":
        return tag.get_text()
    if tag.name == "select":
        option = tag.find("option", selected=True) or tag.find("option")
        if option is None:
            return ""
        return str(option.get("value", option.get_text(strip=True)))
    return str(tag.get("value", ""))


class Element:
    """A single node of the current document.

    Attributes:
        tag: The underlying BeautifulSoup tag.
    """

    def __init__(self, tag: Tag, page: Page) -> None:
        self.tag = tag
        self._page = page

    @property
    def tag_name(self) -> str:
        return self.tag.name

    @property
    def text(self) -> str:
        """Visible, whitespace-normalized text of this element."""
        if not is_displayed(self.tag):
            return ""
        return normalize_whitespace(visible_text(self.tag))

    @property
    def html(self) -> str:
        return str(self.tag)

    @property
    def value(self) -> str:
        """Current value for form fields, as it would be submitted."""
        return _field_value(self.tag)

    @property
    def is_visible(self) -> bool:
        return is_displayed(self.tag)

    def get(self, name: str) -> str | None:
        """Get an attribute value; multi-valued attributes are space-joined."""
        value = self.tag.get(name)
        if isinstance(value, list):
            return " ".join(value)
        return value

    def __getitem__(self, name: str) -> str | None:
        return self.get(name)

    def find(self, selector: str, text: TextQuery | None = None) -> Element:
        """Find exactly one descendant matching selector."""
        tags = self._page._filter(self.tag.select(selector), text)
        return self._page._single(tags, f"css {selector!r}")

    def find_all(self, selector: str, text: TextQuery | None = None) -> list[Element]:
        tags = self._page._filter(self.tag.select(selector), text)
        return [Element(tag, self._page) for tag in tags]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Element) and other.tag is self.tag

    def __hash__(self) -> int:
        return id(self.tag)

    def __repr__(self) -> str:
        return f"<Element {self.tag_name} text={self.text!r}>"


class Page:
    """Driver-backed document handle.

    Example:
        >>> page = Page(app)
        >>> page.visit("/")
        >>> with page.within("nav"):
        ...     page.click_link("About")
        >>> page.has_text("About us")
        True

    Attributes:
        app: The ASGI application under test.
        mode: Name of the driver in use.
        driver: The driver executing requests and exposing the document.
        config: Page configuration.
    """

    def __init__(
        self,
        app: ASGIApp,
        driver: str | None = None,
        config: PageConfig | None = None,
    ) -> None:
        """Bind a new driver to app.

        Args:
            app: The ASGI application under test.
            driver: Registered driver name. Defaults to config.default_driver.
            config: Page configuration. Defaults to PageConfig().

        Raises:
            DriverNotRegistered: If the driver name is unknown.
        """
        self.app = app
        self.config = config or PageConfig()
        self.mode = driver or self.config.default_driver
        self.driver: DriverProtocol = create_driver(self.mode, app, self.config)
        # (selector, tag) pairs; selector is None for Element scopes
        self._scopes: list[tuple[str | None, Tag]] = []
        self._scoped_document: BeautifulSoup | None = None

    # Navigation

    def visit(self, path: str) -> httpx.Response:
        return self.driver.visit(path)

    def click_link(self, locator: str, exact: bool | None = None) -> httpx.Response:
        """Follow the single link matching locator.

        Raises:
            ElementNotFound: If no link matches.
            AmbiguousMatch: If several links match.
        """
        link = self.find_link(locator, exact=exact)
        url, _ = urldefrag(urljoin(self.driver.current_url, str(link.tag["href"])))
        logger.debug(f"Following link {locator!r} to {url}")
        return self.driver.visit(url)

    def click_button(
        self, locator: str, exact: bool | None = None
    ) -> httpx.Response | None:
        """Click the single button matching locator and submit its form.

        Returns:
            The response to the form submission, or None if the button
            does not belong to a form or is a reset/plain button.

        Raises:
            ElementNotFound: If no enabled button matches.
            AmbiguousMatch: If several buttons match.
        """
        button = self.find_button(locator, exact=exact).tag
        if button.name == "input":
            kind = _input_type(button)
        else:
            kind = str(button.get("type") or "submit").lower()
        if kind not in ("submit", "image"):
            return None

        form = self._form_for(button)
        if form is None:
            return None
        return self._submit(form, button)

    def _form_for(self, button: Tag) -> Tag | None:
        form_id = button.get("form")
        if form_id:
            return self.driver.dom.find("form", id=form_id)
        return button.find_parent("form")

    def _submit(self, form: Tag, button: Tag) -> httpx.Response:
        method = str(button.get("formmethod") or form.get("method") or "get").upper()
        if method not in ("GET", "POST"):
            method = "GET"
        action = button.get("formaction") or form.get("action")
        url = urljoin(self.driver.current_url, str(action)) if action else (
            self.driver.current_url
        )
        url, _ = urldefrag(url)
        fields = self._form_fields(form, button)
        logger.debug(f"Submitting form {method} {url}")
        if method == "GET":
            # The query string is replaced by the form data.
            scheme, netloc, path, _, _ = urlsplit(url)
            url = urlunsplit((scheme, netloc, path, "", ""))
            return self.driver.process(method, url, params=fields)
        return self.driver.process(method, url, data=fields)

    @staticmethod
    def _form_fields(form: Tag, button: Tag) -> dict[str, list[str]]:
        fields: dict[str, list[str]] = {}

        def add(name: str, value: str) -> None:
            fields.setdefault(name, []).append(value)

        for tag in form.select(FIELD_SELECTOR):
            name = tag.get("name")
            if not name or _is_disabled(tag):
                continue
            if tag.name == "input":
                kind = _input_type(tag)
                if kind in ("submit", "image", "button", "reset", "file"):
                    continue
                if kind in ("checkbox", "radio"):
                    if tag.has_attr("checked"):
                        add(name, str(tag.get("value", "on")))
                    continue
                add(name, str(tag.get("value", "")))
            elif tag.name == "textarea":
                add(name, tag.get_text())
            elif tag.has_attr("multiple"):
                for option in tag.find_all("option", selected=True):
                    add(name, str(option.get("value", option.get_text(strip=True))))
            else:
                add(name, _field_value(tag))

        if button.get("name"):
            add(str(button["name"]), str(button.get("value", "")))
        return fields

    # Form state

    def fill_in(self, locator: str, value: str, exact: bool | None = None) -> Element:
        """Set the value of the single text field matching locator."""
        field = self.find_field(locator, exact=exact)
        if field.tag.name == "textarea":
            field.tag.string = value
        else:
            field.tag["value"] = value
        return field

    def select(self, value: str, from_: str, exact: bool | None = None) -> Element:
        """Select the option labelled value in the select box from_.

        Raises:
            ElementNotFound: If the select box or the option is missing.
        """
        field = self.find_field(from_, exact=exact)
        if field.tag.name != "select":
            raise ElementNotFound(f"Unable to find select box {from_!r}")

        options = field.tag.find_all("option")
        chosen = next(
            (o for o in options if normalize_whitespace(o.get_text()) == value),
            None,
        )
        if chosen is None:
            raise ElementNotFound(f"Unable to find option {value!r} in {from_!r}")

        if not field.tag.has_attr("multiple"):
            for option in options:
                if option.has_attr("selected"):
                    del option["selected"]
        chosen["selected"] = "selected"
        return field

    def check(self, locator: str, exact: bool | None = None) -> Element:
        field = self._single(
            self._fields(locator, exact=exact, types=("checkbox", "radio")),
            f"checkbox or radio button {locator!r}",
        )
        name = field.tag.get("name")
        if _input_type(field.tag) == "radio" and name:
            scope = field.tag.find_parent("form") or self.driver.dom
            for other in scope.find_all("input", attrs={"name": name}):
                if _input_type(other) == "radio" and other.has_attr("checked"):
                    del other["checked"]
        field.tag["checked"] = "checked"
        return field

    def uncheck(self, locator: str, exact: bool | None = None) -> Element:
        field = self._single(
            self._fields(locator, exact=exact, types=("checkbox",)),
            f"checkbox {locator!r}",
        )
        if field.tag.has_attr("checked"):
            del field.tag["checked"]
        return field

    # Introspection

    @property
    def document(self) -> BeautifulSoup:
        return self.driver.dom

    @property
    def html(self) -> str:
        return self.driver.html

    @property
    def text(self) -> str:
        """Visible text of the current scope."""
        return normalize_whitespace(visible_text(self._current_scope()))

    @property
    def status_code(self) -> int:
        return self.driver.status_code

    @property
    def current_url(self) -> str:
        return self.driver.current_url

    @property
    def current_path(self) -> str:
        return self.driver.current_path

    @property
    def response_headers(self) -> httpx.Headers:
        return self.driver.response_headers

    # Scoping

    def _current_scope(self) -> Tag:
        document = self.driver.dom
        if not self._scopes:
            return document
        if self._scoped_document is not document:
            self._resolve_scopes(document)
        return self._scopes[-1][1]

    def _resolve_scopes(self, document: BeautifulSoup) -> None:
        """Find the active scopes again in a document that replaced theirs.

        Raises:
            ElementNotFound: If a scope is no longer present, or was given
                as an Element.
        """
        logger.debug(f"Resolving {len(self._scopes)} scope(s) in new document")
        scope: Tag = document
        resolved: list[tuple[str | None, Tag]] = []
        for selector, _ in self._scopes:
            if selector is None:
                raise ElementNotFound(
                    "Scope element belongs to a previous document; "
                    "pass a selector to within() to keep it across requests"
                )
            scope = self._single(
                self._filter(scope.select(selector)), f"css {selector!r}"
            ).tag
            resolved.append((selector, scope))
        self._scopes[:] = resolved
        self._scoped_document = document

    @contextmanager
    def within(self, selector: str | Element) -> Iterator[Element]:
        """Restrict queries to the descendants of a single element.

        Args:
            selector: CSS selector resolved in the current scope, or an
                Element found earlier.

        Raises:
            ElementNotFound: If the selector matches nothing.
            AmbiguousMatch: If the selector matches several elements.
        """
        if isinstance(selector, Element):
            element, entry = selector, None
        else:
            element, entry = self.find(selector), selector
        if not self._scopes:
            self._scoped_document = self.driver.dom
        self._scopes.append((entry, element.tag))
        try:
            yield element
        finally:
            # reset() may already have cleared the stack
            if self._scopes:
                self._scopes.pop()

    # Finders

    def _filter(self, tags: list[Tag], text: TextQuery | None = None) -> list[Tag]:
        visible = [tag for tag in tags if is_displayed(tag)]
        if text is None:
            return visible
        return [
            tag
            for tag in visible
            if _text_matches(normalize_whitespace(visible_text(tag)), text)
        ]

    def _query(self, selector: str, text: TextQuery | None = None) -> list[Tag]:
        return self._filter(self._current_scope().select(selector), text)

    def _single(self, tags: list[Tag], description: str) -> Element:
        if not tags:
            raise ElementNotFound(f"Unable to find {description}")
        if len(tags) > 1:
            raise AmbiguousMatch(
                f"Ambiguous match, found {len(tags)} elements matching {description}"
            )
        return Element(tags[0], self)

    def _exact(self, exact: bool | None) -> bool:
        return self.config.exact if exact is None else exact

    def _buttons(
        self,
        locator: str | None = None,
        exact: bool | None = None,
        disabled: bool | None = False,
    ) -> list[Tag]:
        exact = self._exact(exact)
        matches = []
        for tag in self._query(BUTTON_SELECTOR):
            if disabled is not None and _is_disabled(tag) != disabled:
                continue
            if locator is None or tag.get("id") == locator or tag.get("name") == locator:
                matches.append(tag)
                continue
            candidates = [tag.get("value"), tag.get("title"), tag.get("aria-label")]
            if tag.name == "button":
                candidates.append(visible_text(tag))
            elif _input_type(tag) == "image":
                candidates.append(tag.get("alt"))
            if any(_locator_matches(c, locator, exact) for c in candidates):
                matches.append(tag)
        return matches

    def _links(
        self,
        locator: str | None = None,
        href: TextQuery | None = None,
        exact: bool | None = None,
    ) -> list[Tag]:
        exact = self._exact(exact)
        matches = []
        for tag in self._query(LINK_SELECTOR):
            if href is not None:
                target = str(tag["href"])
                if isinstance(href, re.Pattern):
                    if href.search(target) is None:
                        continue
                elif target != href:
                    continue
            if locator is None or tag.get("id") == locator:
                matches.append(tag)
                continue
            candidates = [tag.get("title"), tag.get("aria-label"), visible_text(tag)]
            candidates.extend(img.get("alt") for img in tag.find_all("img"))
            if any(_locator_matches(c, locator, exact) for c in candidates):
                matches.append(tag)
        return matches

    def _labels_for(self, tag: Tag) -> list[Tag]:
        labels = []
        field_id = tag.get("id")
        if field_id:
            labels.extend(self.driver.dom.find_all("label", attrs={"for": field_id}))
        wrapping = tag.find_parent("label")
        if wrapping is not None:
            labels.append(wrapping)
        return labels

    def _fields(
        self,
        locator: str | None = None,
        exact: bool | None = None,
        with_value: str | None = None,
        disabled: bool | None = False,
        types: tuple[str, ...] | None = None,
    ) -> list[Tag]:
        exact = self._exact(exact)
        matches = []
        for tag in self._query(FIELD_SELECTOR):
            if tag.name == "input":
                kind = _input_type(tag)
                if kind in NON_FIELD_INPUT_TYPES:
                    continue
                if types is not None and kind not in types:
                    continue
            elif types is not None:
                continue
            if disabled is not None and _is_disabled(tag) != disabled:
                continue
            if with_value is not None and _field_value(tag) != with_value:
                continue
            if locator is None or tag.get("id") == locator or tag.get("name") == locator:
                matches.append(tag)
                continue
            candidates = [tag.get("placeholder"), tag.get("aria-label")]
            candidates.extend(visible_text(label) for label in self._labels_for(tag))
            if any(_locator_matches(c, locator, exact) for c in candidates):
                matches.append(tag)
        return matches

    def find(self, selector: str, text: TextQuery | None = None) -> Element:
        """Find exactly one element matching a CSS selector.

        Raises:
            ElementNotFound: If nothing matches.
            AmbiguousMatch: If several elements match.
        """
        return self._single(self._query(selector, text), f"css {selector!r}")

    def find_all(self, selector: str, text: TextQuery | None = None) -> list[Element]:
        return [Element(tag, self) for tag in self._query(selector, text)]

    def find_button(self, locator: str, exact: bool | None = None) -> Element:
        return self._single(self._buttons(locator, exact), f"button {locator!r}")

    def find_link(self, locator: str, exact: bool | None = None) -> Element:
        return self._single(self._links(locator, exact=exact), f"link {locator!r}")

    def find_field(self, locator: str, exact: bool | None = None) -> Element:
        return self._single(self._fields(locator, exact), f"field {locator!r}")

    # Matchers

    def has_css(
        self,
        selector: str,
        count: int | None = None,
        text: TextQuery | None = None,
    ) -> bool:
        found = len(self._query(selector, text))
        if count is not None:
            return found == count
        return found > 0

    def has_no_css(
        self,
        selector: str,
        count: int | None = None,
        text: TextQuery | None = None,
    ) -> bool:
        return not self.has_css(selector, count=count, text=text)

    has_selector = has_css
    has_no_selector = has_no_css

    def has_button(
        self,
        locator: str | None = None,
        exact: bool | None = None,
        disabled: bool | None = False,
    ) -> bool:
        return bool(self._buttons(locator, exact, disabled))

    def has_no_button(
        self,
        locator: str | None = None,
        exact: bool | None = None,
        disabled: bool | None = False,
    ) -> bool:
        return not self.has_button(locator, exact, disabled)

    def has_link(
        self,
        locator: str | None = None,
        href: TextQuery | None = None,
        exact: bool | None = None,
    ) -> bool:
        return bool(self._links(locator, href, exact))

    def has_no_link(
        self,
        locator: str | None = None,
        href: TextQuery | None = None,
        exact: bool | None = None,
    ) -> bool:
        return not self.has_link(locator, href, exact)

    def has_field(
        self,
        locator: str | None = None,
        with_value: str | None = None,
        exact: bool | None = None,
    ) -> bool:
        return bool(self._fields(locator, exact, with_value))

    def has_no_field(
        self,
        locator: str | None = None,
        with_value: str | None = None,
        exact: bool | None = None,
    ) -> bool:
        return not self.has_field(locator, with_value, exact)

    def has_text(self, text: TextQuery) -> bool:
        """Check the visible text of the current scope.

        Args:
            text: Substring to look for (whitespace-normalized), or a
                compiled pattern to search for.
        """
        return _text_matches(self.text, text)

    def has_no_text(self, text: TextQuery) -> bool:
        return not self.has_text(text)

    def has_current_path(self, path: TextQuery) -> bool:
        """Compare against the current path.

        The query string is included in the comparison only when the
        expected path contains one.
        """
        url = httpx.URL(self.current_url)
        actual = url.path
        if isinstance(path, re.Pattern):
            return path.search(actual) is not None
        if "?" in path and url.query:
            actual = f"{actual}?{url.query.decode()}"
        return actual == path

    # Lifecycle

    def reset(self) -> None:
        """Drop any active scopes."""
        self._scopes.clear()
        self._scoped_document = None

    def quit(self) -> None:
        """Drop scopes and release the driver."""
        self.reset()
        self.driver.quit()
