"""
Playwright-based BrowserDriver implementation (sync API).

Conforms to io/driver.py's BrowserDriver Protocol:
- start() / stop() / is_running          (allocation scope: the browser)
- new_context() / close_context(ctx)     (task scope: one tab)
- goto / location / title
- outer_html / text / value / attribute  (element reads)
- send_keys / set_value / clear / click  (element interactions)
- evaluate / execute                     (script)
- screenshot

Selectors are resolved per call, never cached:
- QueryKind.CSS      -> `css=` locator, first match
- QueryKind.XPATH    -> `xpath=` locator, first match
- QueryKind.JS_PATH  -> element returned by evaluating the expression

Playwright errors are translated into fluent_page.core.errors types with the
original exception chained as the cause.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Type, Union

from playwright.sync_api import (
    Browser,
    BrowserContext,
    ElementHandle,
    Error as PwError,
    Locator,
    Page,
    Playwright,
    TimeoutError as PwTimeoutError,
    sync_playwright,
)

from ..core.errors import (
    DriverError,
    ElementNotFoundError,
    FluentPageError,
    LaunchError,
    NavigationError,
    PageClosedError,
    ScriptError,
    UndefinedResultIgnored,
    WaitTimeoutError,
)
from ..core.query import QueryKind

logger = logging.getLogger(__name__)

Target = Union[Locator, ElementHandle]

_UNDEFINED_MARKER = "__fluentPageUndefined"

# Indirect eval runs the source in global scope, statements allowed.
_EVALUATE_JS = (
    "(source) => {"
    "  const value = (0, eval)(source);"
    f"  return value === undefined ? {{ {_UNDEFINED_MARKER}: true }} : value;"
    "}"
)
_EXECUTE_JS = "(source) => { (0, eval)(source); }"

_IS_FILE_INPUT_JS = "e => e instanceof HTMLInputElement && e.type === 'file'"
_VALUE_JS = "e => (e.value === undefined || e.value === null) ? '' : String(e.value)"
_SET_VALUE_JS = "(e, v) => { e.value = v; }"
_OUTER_HTML_JS = "e => e.outerHTML"


class PlaywrightDriver:
    """
    A concrete BrowserDriver based on Playwright.
    - `ctx` in this implementation is a Playwright `Page`.
    - Each `new_context()` creates an incognito BrowserContext + a new Page.
    """

    def __init__(
        self,
        *,
        headless: bool = True,
        proxy: Optional[str] = None,
        browser: str = "chromium",
        slow_mo_ms: int = 0,
        default_timeout_ms: int = 30_000,
    ) -> None:
        self.headless = headless
        self.proxy = proxy
        self.browser = browser
        self.slow_mo_ms = slow_mo_ms
        self.default_timeout_ms = default_timeout_ms

        self._pw: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._page_to_context: Dict[Page, BrowserContext] = {}

    # ---------------- lifecycle ----------------

    def start(self) -> None:
        """Launch Playwright and the browser once."""
        if self._browser is not None:
            return
        logger.info(
            "launching %s (headless=%s, proxy=%s)", self.browser, self.headless, self.proxy or "-"
        )
        try:
            pw = sync_playwright().start()
        except PwError as e:
            raise LaunchError("failed to start playwright", action="launch", cause=e) from e
        self._pw = pw
        try:
            browser_type = getattr(pw, self.browser)
            self._browser = browser_type.launch(
                headless=self.headless,
                slow_mo=self.slow_mo_ms,
                proxy={"server": self.proxy} if self.proxy else None,
            )
        except PwError as e:
            self._pw = None
            pw.stop()
            raise LaunchError(
                "failed to launch browser",
                action="launch",
                details={"browser": self.browser, "headless": self.headless, "proxy": self.proxy},
                cause=e,
            ) from e

    def stop(self) -> None:
        """Close all contexts, the browser, and stop Playwright. Safe on a dead browser."""
        if self._pw is None and self._browser is None:
            return
        try:
            with self._translating("stop"):
                for page, ctx in list(self._page_to_context.items()):
                    try:
                        ctx.close()
                    except PwError as e:
                        logger.debug("context close failed for %s: %s", page.url, e)
                self._page_to_context.clear()
                if self._browser is not None and self._browser.is_connected():
                    self._browser.close()
        finally:
            pw, self._pw, self._browser = self._pw, None, None
            if pw is not None:
                with self._translating("stop"):
                    pw.stop()
            logger.info("browser stopped")

    @property
    def is_running(self) -> bool:
        return self._browser is not None and self._browser.is_connected()

    def new_context(self) -> Page:
        """
        Create a fresh incognito context + page.
        Returns the Page object to be used as `ctx`.
        CSP is bypassed so evaluate()/execute() work on pages that forbid eval.
        """
        self._ensure_started()
        assert self._browser is not None
        try:
            ctx = self._browser.new_context(bypass_csp=True)
            ctx.set_default_timeout(self.default_timeout_ms)
            page = ctx.new_page()
        except PwError as e:
            raise LaunchError("failed to open browser session", action="new_context", cause=e) from e
        self._page_to_context[page] = ctx
        return page

    def close_context(self, ctx: Any) -> None:
        """Close the page and its owning context."""
        if not isinstance(ctx, Page):
            raise TypeError("ctx must be a Playwright Page (returned by new_context()).")
        context = self._page_to_context.pop(ctx, None)
        if not self.is_running:
            return
        with self._translating("close_context"):
            try:
                ctx.close()
            finally:
                if context is not None:
                    context.close()

    # ---------------- navigation & document ----------------

    def goto(self, ctx: Any, url: str, *, timeout_ms: Optional[int] = None) -> None:
        page = self._as_page(ctx)
        logger.debug("goto %s", url)
        with self._translating("navigate", url=url, timeout_cls=NavigationError, error_cls=NavigationError):
            page.goto(url, timeout=timeout_ms or self.default_timeout_ms, wait_until="load")

    def location(self, ctx: Any) -> str:
        page = self._as_page(ctx)
        with self._translating("url"):
            return page.evaluate("() => document.location.toString()")

    def title(self, ctx: Any) -> str:
        page = self._as_page(ctx)
        with self._translating("title"):
            return page.title()

    # ---------------- element queries ----------------

    def outer_html(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> str:
        page = self._as_page(ctx)
        with self._translating("outer_html", selector=selector):
            with self._resolved(page, selector, by, visible=visible) as target:
                return target.evaluate(_OUTER_HTML_JS)

    def text(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> str:
        page = self._as_page(ctx)
        with self._translating("text", selector=selector):
            with self._resolved(page, selector, by, visible=visible) as target:
                return target.inner_text()

    def value(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> str:
        page = self._as_page(ctx)
        with self._translating("value", selector=selector):
            with self._resolved(page, selector, by, visible=visible) as target:
                return target.evaluate(_VALUE_JS)

    def attribute(
        self, ctx: Any, selector: str, name: str, *, by: QueryKind = QueryKind.CSS
    ) -> str:
        page = self._as_page(ctx)
        with self._translating("attribute", selector=selector):
            with self._resolved(page, selector, by) as target:
                value = target.get_attribute(name)
        return value if value is not None else ""

    # ---------------- interactions ----------------

    def send_keys(
        self, ctx: Any, selector: str, keys: str, *, by: QueryKind = QueryKind.CSS
    ) -> None:
        """
        Type `keys` into the element. File inputs cannot be typed into, so
        for them `keys` is taken as the file path to attach.
        """
        page = self._as_page(ctx)
        with self._translating("send_keys", selector=selector):
            with self._resolved(page, selector, by) as target:
                if target.evaluate(_IS_FILE_INPUT_JS):
                    target.set_input_files(keys)
                    return
                target.focus()
                page.keyboard.type(keys)

    def set_value(
        self, ctx: Any, selector: str, value: str, *, by: QueryKind = QueryKind.CSS
    ) -> None:
        page = self._as_page(ctx)
        with self._translating("set_value", selector=selector):
            with self._resolved(page, selector, by) as target:
                target.evaluate(_SET_VALUE_JS, value)

    def clear(self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS) -> None:
        page = self._as_page(ctx)
        with self._translating("clear", selector=selector):
            with self._resolved(page, selector, by) as target:
                target.fill("")

    def click(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> None:
        page = self._as_page(ctx)
        with self._translating("click", selector=selector):
            with self._resolved(page, selector, by, visible=visible) as target:
                target.scroll_into_view_if_needed()
                target.click()

    # ---------------- script ----------------

    def evaluate(self, ctx: Any, script: str) -> Any:
        """Evaluate `script` and return its value; `undefined` raises UndefinedResultIgnored."""
        page = self._as_page(ctx)
        with self._translating("evaluate", error_cls=ScriptError):
            result = page.evaluate(_EVALUATE_JS, script)
        if isinstance(result, dict) and result.get(_UNDEFINED_MARKER) is True:
            raise UndefinedResultIgnored("script evaluated to undefined", action="evaluate")
        return result

    def execute(self, ctx: Any, script: str) -> None:
        """Evaluate `script` for its side effects only."""
        page = self._as_page(ctx)
        with self._translating("execute", error_cls=ScriptError):
            page.evaluate(_EXECUTE_JS, script)

    # ---------------- utilities ----------------

    def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None:
        page = self._as_page(ctx)
        Path(path).parent.mkdir(parents=True, exist_ok=True)
        with self._translating("screenshot"):
            page.screenshot(path=path, full_page=full_page)

    # ---------------- internals ----------------

    @contextmanager
    def _resolved(
        self, page: Page, selector: str, by: QueryKind, *, visible: bool = False
    ) -> Iterator[Target]:
        """
        Find the first element for `selector`, waiting for it to attach (or show).
        JS-path handles live in the page until disposed, so they are released on exit.
        """
        if by is QueryKind.JS_PATH:
            handle = page.evaluate_handle(selector)
            element = handle.as_element()
            if element is None:
                handle.dispose()
                raise ElementNotFoundError(
                    "js path did not evaluate to an element", action="resolve", selector=selector
                )
            try:
                if visible:
                    element.wait_for_element_state("visible")
                yield element
            finally:
                element.dispose()
            return

        prefix = "xpath=" if by is QueryKind.XPATH else "css="
        locator = page.locator(prefix + selector).first
        try:
            locator.wait_for(state="visible" if visible else "attached")
        except PwTimeoutError as e:
            if visible:
                raise WaitTimeoutError(
                    "element did not become visible in time", action="resolve", selector=selector, cause=e
                ) from e
            raise ElementNotFoundError(
                "no element matched selector", action="resolve", selector=selector, cause=e
            ) from e
        yield locator

    @contextmanager
    def _translating(
        self,
        action: str,
        *,
        selector: Optional[str] = None,
        url: Optional[str] = None,
        timeout_cls: Type[FluentPageError] = WaitTimeoutError,
        error_cls: Type[FluentPageError] = DriverError,
    ) -> Iterator[None]:
        try:
            yield
        except FluentPageError:
            raise
        except PwTimeoutError as e:
            raise timeout_cls(
                "timed out waiting for browser", action=action, selector=selector, url=url, cause=e
            ) from e
        except PwError as e:
            if not self.is_running:
                raise PageClosedError("browser is no longer running", action=action, cause=e) from e
            raise error_cls(
                e.message, action=action, selector=selector, url=url, cause=e
            ) from e

    def _ensure_started(self) -> None:
        if self._browser is None:
            raise PageClosedError("browser not started; call start() first", action="new_context")

    def _as_page(self, ctx: Any) -> Page:
        if not isinstance(ctx, Page):
            raise TypeError("ctx must be a Playwright Page (returned by new_context()).")
        if ctx.is_closed():
            raise PageClosedError("tab is closed")
        return ctx
