"""
Selection: a deferred query bound to a Page.

A Selection is immutable and holds only a weak reference to its Page; it
never keeps a browser alive. Nothing is cached: every call re-resolves the
selector against the live document.
"""
# @file purpose: Element-level operations over a Page's driver.

from __future__ import annotations

import json
import logging
import os
import weakref
from typing import TYPE_CHECKING, Any, Optional

from .errors import FluentPageError, PageClosedError, PathError
from .query import QueryKind, TargetKind, classify_target

if TYPE_CHECKING:
    from .page import Page
    from ..io.driver import BrowserDriver

logger = logging.getLogger(__name__)


class Selection:
    __slots__ = ("query", "kind", "target", "_page_ref")

    def __init__(
        self,
        page: "Page",
        query: str,
        kind: QueryKind = QueryKind.CSS,
        target: Optional[TargetKind] = None,
    ) -> None:
        self.query = query
        self.kind = kind
        self.target = target
        self._page_ref = weakref.ref(page)

    @property
    def page(self) -> "Page":
        page = self._page_ref()
        if page is None:
            raise PageClosedError("page is gone", selector=self.query)
        return page

    @property
    def target_kind(self) -> TargetKind:
        return classify_target(self.query, self.target)

    # ---------------- reads ----------------

    def text(self) -> str:
        """Visible text of the element; the selector "title" reads the document title."""
        driver, ctx = self._session("text")
        if self.query == "title":
            return driver.title(ctx)
        return driver.text(ctx, self.query, by=self.kind, visible=True)

    def value(self) -> str:
        driver, ctx = self._session("value")
        return driver.value(ctx, self.query, by=self.kind, visible=True)

    def get_input_value(self) -> str:
        """Like value(), without waiting for visibility."""
        driver, ctx = self._session("get_input_value")
        return driver.value(ctx, self.query, by=self.kind, visible=False)

    def attribute(self, name: str) -> str:
        """Attribute value, or "" when the element has no such attribute."""
        driver, ctx = self._session("attribute")
        return driver.attribute(ctx, self.query, name, by=self.kind)

    def url(self) -> str:
        driver, ctx = self._session("url")
        return driver.location(ctx)

    # ---------------- interactions ----------------

    def send_keys(self, keys: str) -> None:
        driver, ctx = self._session("send_keys")
        driver.send_keys(ctx, self.query, keys, by=self.kind)

    def send_key_by_shadow_dom(self, keys: str) -> None:
        """
        Send keys to an element addressed by a JS path, e.g.
        document.querySelector('#container').shadowRoot.querySelector('#foo')
        """
        driver, ctx = self._session("send_key_by_shadow_dom")
        driver.send_keys(ctx, self.query, keys, by=QueryKind.JS_PATH)

    def remove_input(self) -> None:
        driver, ctx = self._session("remove_input")
        driver.set_value(ctx, self.query, "", by=self.kind)

    def clear(self) -> None:
        driver, ctx = self._session("clear")
        driver.clear(ctx, self.query, by=self.kind)

    def click(self) -> None:
        """
        Click the element.

        Option targets are selected by script instead (set .selected and fire
        change), followed by a click on <html> to close the dropdown. The
        html click's outcome is ignored; the script's error is raised.
        """
        driver, ctx = self._session("click")
        if self.target_kind is not TargetKind.OPTION:
            driver.click(ctx, self.query, by=self.kind, visible=True)
            return

        logger.debug("selecting option by script: %s", self.query)
        error: Optional[FluentPageError] = None
        try:
            driver.execute(ctx, self._option_select_script())
        except FluentPageError as e:
            error = e
        try:
            self.page.find("html", target=TargetKind.GENERIC).click()
        except FluentPageError as e:
            logger.debug("html click after option select failed: %s", e)
        if error is not None:
            raise error

    def upload_file(self, filename: str) -> None:
        """Send the absolute path of `filename` to a file input."""
        try:
            path = os.path.abspath(filename)
        except (OSError, ValueError) as e:
            raise PathError(
                "failed to find absolute path for filename",
                action="upload_file",
                selector=self.query,
                details={"filename": filename},
                cause=e,
            ) from e
        self.send_keys(path)

    # ---------------- internals ----------------

    def _session(self, action: str) -> "tuple[BrowserDriver, Any]":
        try:
            return self.page._session(action)
        except PageClosedError as e:
            e.selector = e.selector or self.query
            raise

    def _option_select_script(self) -> str:
        q = json.dumps(self.query)
        if self.kind is QueryKind.XPATH:
            lookup = (
                f"document.evaluate({q}, document, null, "
                "XPathResult.FIRST_ORDERED_NODE_TYPE, null).singleNodeValue"
            )
        elif self.kind is QueryKind.JS_PATH:
            lookup = f"({self.query})"
        else:
            lookup = f"document.querySelector({q})"
        # onchange usually lives on the owning <select>, not the <option>.
        return (
            "(function () {"
            f" var el = {lookup};"
            " el.selected = true;"
            " if (window.jQuery) { window.jQuery(el).change(); return; }"
            " var owner = el.closest ? el.closest('select') : null;"
            " if (typeof el.onchange === 'function') { el.onchange(); }"
            " else if (owner && typeof owner.onchange === 'function') { owner.onchange(); }"
            " else if (owner) { owner.dispatchEvent(new Event('change', { bubbles: true })); }"
            "})();"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selection):
            return NotImplemented
        return (
            self.query == other.query
            and self.kind == other.kind
            and self.target == other.target
            and self._page_ref() is other._page_ref()
        )

    def __hash__(self) -> int:
        return hash((self.query, self.kind, self.target, id(self._page_ref())))

    def __repr__(self) -> str:
        return f"Selection({self.query!r}, kind={self.kind.value})"
