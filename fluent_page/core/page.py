"""
Page: one browser tab plus the browser it was launched in.

Two lifetimes are held explicitly:
- allocation scope: the driver (launched browser), torn down by cancel_alloc()
- task scope: the tab created from that driver, torn down by close_window()

Closing the allocation scope invalidates every Page opened from it. Nothing
is released on garbage collection; call close() or use the Page as a
context manager.
"""
# @file purpose: Page facade over a BrowserDriver.

from __future__ import annotations

import json
import logging
from typing import Any, Callable, Optional

from .errors import FluentPageError, PageClosedError, UndefinedResultIgnored
from .query import QueryKind, TargetKind
from .selection import Selection
from .settings import settings
from ..io.driver import BrowserDriver
from ..io.playwright_driver import PlaywrightDriver

logger = logging.getLogger(__name__)

DriverFactory = Callable[..., BrowserDriver]


class Page:
    def __init__(self, driver: BrowserDriver, ctx: Any) -> None:
        self._driver = driver
        self._ctx = ctx
        self._window_open = True
        self._alloc_open = True

    # ---------------- construction ----------------

    @classmethod
    def new(
        cls,
        headless: Optional[bool] = None,
        proxy: Optional[str] = None,
        *,
        driver_factory: DriverFactory = PlaywrightDriver,
    ) -> "Page":
        """
        Launch a browser and open one tab in it.
        `headless` and `proxy` fall back to settings when omitted.
        Raises LaunchError if the browser or the session cannot be started.
        """
        driver = driver_factory(
            headless=settings.headless if headless is None else headless,
            proxy=proxy if proxy is not None else settings.proxy,
            browser=settings.browser,
            slow_mo_ms=settings.slow_mo_ms,
            default_timeout_ms=settings.default_timeout_ms,
        )
        driver.start()
        try:
            ctx = driver.new_context()
        except FluentPageError:
            driver.stop()
            raise
        return cls(driver, ctx)

    @classmethod
    def new_proxy(
        cls, headless: Optional[bool], proxy: str, *, driver_factory: DriverFactory = PlaywrightDriver
    ) -> "Page":
        """Same as new(), with a mandatory proxy server."""
        if not proxy:
            raise ValueError("proxy must be a non-empty server address")
        return cls.new(headless, proxy, driver_factory=driver_factory)

    def open_tab(self) -> "Page":
        """Open another tab in the same browser; it shares this page's allocation scope."""
        driver, _ = self._session("open_tab")
        return Page(driver, driver.new_context())

    # ---------------- teardown ----------------

    def close_window(self) -> None:
        """Tear down the task scope (this tab only)."""
        if not self._window_open:
            return
        self._window_open = False
        if self._driver.is_running:
            self._driver.close_context(self._ctx)

    def cancel_alloc(self) -> None:
        """
        Tear down the allocation scope; every tab of this browser becomes invalid.
        Always reaches driver.stop(), even when the browser already died, so the
        driver process is released.
        """
        if not self._alloc_open:
            return
        self._alloc_open = False
        self._driver.stop()

    def close(self) -> None:
        try:
            self.close_window()
        finally:
            self.cancel_alloc()

    @property
    def closed(self) -> bool:
        return not (self._window_open and self._alloc_open and self._driver.is_running)

    def __enter__(self) -> "Page":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    # ---------------- page operations ----------------

    def navigate(self, url: str) -> None:
        driver, ctx = self._session("navigate")
        logger.info("navigate %s", url)
        driver.goto(ctx, url)

    def find(self, selector: str, target: Optional[TargetKind] = None) -> Selection:
        return Selection(self, selector, QueryKind.CSS, target)

    def find_xpath(self, xpath: str, target: Optional[TargetKind] = None) -> Selection:
        return Selection(self, xpath, QueryKind.XPATH, target)

    def find_js_path(self, expression: str) -> Selection:
        """Selection resolved by a JS expression, e.g. for elements inside shadow roots."""
        return Selection(self, expression, QueryKind.JS_PATH)

    def html(self) -> str:
        driver, ctx = self._session("html")
        return driver.outer_html(ctx, "html", by=QueryKind.CSS, visible=True)

    def url(self) -> str:
        driver, ctx = self._session("url")
        return driver.location(ctx)

    def title(self) -> str:
        driver, ctx = self._session("title")
        return driver.title(ctx)

    def run_script(self, script: str) -> list[str]:
        """
        Evaluate `script` in the page and coerce the value to a list of strings.

        Best effort: no argument binding, no typed results. Arrays map
        element-wise (non-strings JSON-encoded), a scalar becomes a one-item
        list, null becomes []. A script evaluating to undefined also gives [].
        """
        driver, ctx = self._session("run_script")
        try:
            result = driver.evaluate(ctx, script)
        except UndefinedResultIgnored:
            logger.debug("script evaluated to undefined; returning empty result")
            return []
        return _as_strings(result)

    def screenshot(self, path: str, *, full_page: bool = True) -> None:
        driver, ctx = self._session("screenshot")
        driver.screenshot(ctx, path, full_page=full_page)

    # ---------------- internals ----------------

    def _session(self, action: str) -> tuple[BrowserDriver, Any]:
        if not self._window_open:
            raise PageClosedError("page window was closed", action=action)
        if not (self._alloc_open and self._driver.is_running):
            raise PageClosedError("browser allocation was cancelled", action=action)
        return self._driver, self._ctx

    def __repr__(self) -> str:
        state = "closed" if self.closed else "open"
        return f"<Page {state} driver={type(self._driver).__name__}>"


def _as_strings(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [v if isinstance(v, str) else json.dumps(v) for v in value]
    return [value if isinstance(value, str) else json.dumps(value)]
