"""
Browser driver protocol (abstraction).

This Protocol is the whole collaborator surface Page and Selection rely on.
It allows plugging different backends (Playwright, a fake for tests, a
future CDP client) without touching the facade.

Notes:
- The driver instance is the allocation scope: start() launches the browser,
  stop() tears it down and invalidates every context created from it.
- `ctx` is the task scope (one tab), created via new_context() and released
  via close_context().
- Every call is blocking. Element calls take a QueryKind and a `visible`
  flag; when `visible` is set the driver waits for visibility first.
- Implementations raise fluent_page.core.errors types, never backend errors.
"""

from __future__ import annotations

from typing import Any, Protocol

from ..core.query import QueryKind


class BrowserDriver(Protocol):
    # -------- lifecycle --------
    def start(self) -> None: ...
    def stop(self) -> None: ...
    @property
    def is_running(self) -> bool: ...
    def new_context(self) -> Any: ...
    def close_context(self, ctx: Any) -> None: ...

    # -------- navigation & document --------
    def goto(self, ctx: Any, url: str, *, timeout_ms: int | None = None) -> None: ...
    def location(self, ctx: Any) -> str: ...
    def title(self, ctx: Any) -> str: ...

    # -------- element queries --------
    def outer_html(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> str: ...
    def text(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> str: ...
    def value(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> str: ...
    def attribute(
        self, ctx: Any, selector: str, name: str, *, by: QueryKind = QueryKind.CSS
    ) -> str: ...

    # -------- interactions --------
    def send_keys(
        self, ctx: Any, selector: str, keys: str, *, by: QueryKind = QueryKind.CSS
    ) -> None: ...
    def set_value(
        self, ctx: Any, selector: str, value: str, *, by: QueryKind = QueryKind.CSS
    ) -> None: ...
    def clear(self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS) -> None: ...
    def click(
        self, ctx: Any, selector: str, *, by: QueryKind = QueryKind.CSS, visible: bool = False
    ) -> None: ...

    # -------- script --------
    def evaluate(self, ctx: Any, script: str) -> Any: ...
    def execute(self, ctx: Any, script: str) -> None: ...

    # -------- utilities --------
    def screenshot(self, ctx: Any, path: str, *, full_page: bool = True) -> None: ...
