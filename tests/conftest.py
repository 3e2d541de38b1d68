"""Shared fixtures: an in-memory BrowserDriver that records every call."""
# @file purpose: Fake driver for facade tests.

from __future__ import annotations

from typing import Any

import pytest

from fluent_page.core.errors import (
    ElementNotFoundError,
    PageClosedError,
)
from fluent_page.core.page import Page
from fluent_page.core.query import QueryKind


class FakeDriver:
    """
    Records calls as (method, args...) tuples.
    `elements` maps selector -> {"text", "value", "attrs", "html"}; a selector
    missing from it raises ElementNotFoundError. Errors can be queued per
    method name via `fail_on`.
    """

    def __init__(self, **options: Any) -> None:
        self.options = options
        self.calls: list[tuple] = []
        self.running = False
        self.contexts: list[int] = []
        self.closed_contexts: list[int] = []
        self.doc_title = "Fake Title"
        self.doc_url = "about:blank"
        self.elements: dict[str, dict[str, Any]] = {
            "html": {"text": "", "value": "", "attrs": {}, "html": "<html><body></body></html>"},
        }
        self.script_result: Any = None
        self.fail_on: dict[str, Exception] = {}

    # ---- lifecycle ----
    def start(self) -> None:
        self.calls.append(("start",))
        if "start" in self.fail_on:
            raise self.fail_on["start"]
        self.running = True

    def stop(self) -> None:
        self.calls.append(("stop",))
        self.running = False

    @property
    def is_running(self) -> bool:
        return self.running

    def new_context(self) -> int:
        self.calls.append(("new_context",))
        if "new_context" in self.fail_on:
            raise self.fail_on["new_context"]
        ctx = len(self.contexts) + 1
        self.contexts.append(ctx)
        return ctx

    def close_context(self, ctx: Any) -> None:
        self.calls.append(("close_context", ctx))
        self.closed_contexts.append(ctx)

    # ---- helpers ----
    def _check(self, method: str, ctx: Any) -> None:
        if not self.running or ctx in self.closed_contexts:
            raise PageClosedError("fake browser closed", action=method)
        if method in self.fail_on:
            raise self.fail_on[method]

    def _element(self, selector: str) -> dict[str, Any]:
        try:
            return self.elements[selector]
        except KeyError:
            raise ElementNotFoundError("no element matched selector", selector=selector) from None

    # ---- navigation & document ----
    def goto(self, ctx: Any, url: str, *, timeout_ms: int | None = None) -> None:
        self.calls.append(("goto", ctx, url))
        self._check("goto", ctx)
        self.doc_url = url

    def location(self, ctx: Any) -> str:
        self.calls.append(("location", ctx))
        self._check("location", ctx)
        return self.doc_url

    def title(self, ctx: Any) -> str:
        self.calls.append(("title", ctx))
        self._check("title", ctx)
        return self.doc_title

    # ---- element queries ----
    def outer_html(self, ctx, selector, *, by=QueryKind.CSS, visible=False) -> str:
        self.calls.append(("outer_html", selector, by, visible))
        self._check("outer_html", ctx)
        return self._element(selector)["html"]

    def text(self, ctx, selector, *, by=QueryKind.CSS, visible=False) -> str:
        self.calls.append(("text", selector, by, visible))
        self._check("text", ctx)
        return self._element(selector)["text"]

    def value(self, ctx, selector, *, by=QueryKind.CSS, visible=False) -> str:
        self.calls.append(("value", selector, by, visible))
        self._check("value", ctx)
        return self._element(selector)["value"]

    def attribute(self, ctx, selector, name, *, by=QueryKind.CSS) -> str:
        self.calls.append(("attribute", selector, name, by))
        self._check("attribute", ctx)
        return self._element(selector)["attrs"].get(name, "")

    # ---- interactions ----
    def send_keys(self, ctx, selector, keys, *, by=QueryKind.CSS) -> None:
        self.calls.append(("send_keys", selector, keys, by))
        self._check("send_keys", ctx)
        self._element(selector)["value"] += keys

    def set_value(self, ctx, selector, value, *, by=QueryKind.CSS) -> None:
        self.calls.append(("set_value", selector, value, by))
        self._check("set_value", ctx)
        self._element(selector)["value"] = value

    def clear(self, ctx, selector, *, by=QueryKind.CSS) -> None:
        self.calls.append(("clear", selector, by))
        self._check("clear", ctx)
        self._element(selector)["value"] = ""

    def click(self, ctx, selector, *, by=QueryKind.CSS, visible=False) -> None:
        self.calls.append(("click", selector, by, visible))
        self._check("click", ctx)
        self._element(selector)

    # ---- script ----
    def evaluate(self, ctx: Any, script: str) -> Any:
        self.calls.append(("evaluate", script))
        self._check("evaluate", ctx)
        return self.script_result

    def execute(self, ctx: Any, script: str) -> None:
        self.calls.append(("execute", script))
        self._check("execute", ctx)

    def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None:
        self.calls.append(("screenshot", path, full_page))
        self._check("screenshot", ctx)

    def names(self) -> list[str]:
        return [c[0] for c in self.calls]


def element(text: str = "", value: str = "", html: str = "", **attrs: str) -> dict[str, Any]:
    return {"text": text, "value": value, "attrs": dict(attrs), "html": html}


@pytest.fixture()
def driver() -> FakeDriver:
    return FakeDriver()


@pytest.fixture()
def page(driver: FakeDriver) -> Page:
    p = Page.new(driver_factory=lambda **_: driver)
    driver.calls.clear()
    return p


