import gc

import pytest

from conftest import FakeDriver
from fluent_page.core.errors import (
    LaunchError,
    NavigationError,
    PageClosedError,
    ScriptError,
    UndefinedResultIgnored,
)
from fluent_page.core.page import Page
from fluent_page.core.query import QueryKind


def test_new_starts_driver_and_opens_one_tab() -> None:
    created: list[FakeDriver] = []

    def factory(**options):
        d = FakeDriver(**options)
        created.append(d)
        return d

    page = Page.new(False, "http://proxy.local:3128", driver_factory=factory)

    (d,) = created
    assert d.options["headless"] is False
    assert d.options["proxy"] == "http://proxy.local:3128"
    assert d.names() == ["start", "new_context"]
    assert not page.closed


def test_new_falls_back_to_settings(monkeypatch: pytest.MonkeyPatch) -> None:
    from fluent_page.core import page as page_mod

    monkeypatch.setattr(page_mod.settings, "headless", True)
    monkeypatch.setattr(page_mod.settings, "proxy", None)
    d = FakeDriver()
    holder = {}

    def factory(**options):
        holder.update(options)
        return d

    Page.new(driver_factory=factory)
    assert holder["headless"] is True
    assert holder["proxy"] is None


def test_new_raises_launch_error_from_driver() -> None:
    d = FakeDriver()
    d.fail_on["start"] = LaunchError("no chromium", action="launch")

    with pytest.raises(LaunchError):
        Page.new(driver_factory=lambda **_: d)


def test_new_stops_browser_when_session_cannot_open() -> None:
    d = FakeDriver()
    d.fail_on["new_context"] = LaunchError("no tab", action="new_context")

    with pytest.raises(LaunchError):
        Page.new(driver_factory=lambda **_: d)
    assert d.names() == ["start", "new_context", "stop"]
    assert not d.running


def test_new_proxy_requires_a_proxy() -> None:
    with pytest.raises(ValueError):
        Page.new_proxy(True, "", driver_factory=FakeDriver)


def test_navigate_url_title(page: Page, driver: FakeDriver) -> None:
    page.navigate("https://example.test/form")
    assert page.url() == "https://example.test/form"
    assert page.title() == "Fake Title"
    assert driver.names() == ["goto", "location", "title"]


def test_navigate_error_propagates(page: Page, driver: FakeDriver) -> None:
    driver.fail_on["goto"] = NavigationError("net::ERR_NAME_NOT_RESOLVED", url="https://nope.test")
    with pytest.raises(NavigationError):
        page.navigate("https://nope.test")


def test_html_is_visibility_gated_on_root(page: Page, driver: FakeDriver) -> None:
    assert page.html() == "<html><body></body></html>"
    assert driver.calls == [("outer_html", "html", QueryKind.CSS, True)]


@pytest.mark.parametrize(
    "result, expected",
    [
        (["a", "b"], ["a", "b"]),
        ([1, True, None, {"k": 1}], ["1", "true", "null", '{"k": 1}']),
        ("solo", ["solo"]),
        (42, ["42"]),
        (None, []),
    ],
)
def test_run_script_coerces_to_strings(page: Page, driver: FakeDriver, result, expected) -> None:
    driver.script_result = result
    assert page.run_script("return stuff") == expected


def test_run_script_swallows_undefined_result(page: Page, driver: FakeDriver) -> None:
    driver.fail_on["evaluate"] = UndefinedResultIgnored("script evaluated to undefined")
    assert page.run_script("void 0") == []


def test_run_script_raises_script_errors(page: Page, driver: FakeDriver) -> None:
    driver.fail_on["evaluate"] = ScriptError("ReferenceError: nope is not defined")
    with pytest.raises(ScriptError):
        page.run_script("nope()")


def test_find_and_find_xpath_differ_only_in_kind(page: Page) -> None:
    css = page.find("//div")
    xpath = page.find_xpath("//div")

    assert css.page is xpath.page is page
    assert css.query == xpath.query
    assert css.target == xpath.target
    assert css.kind is QueryKind.CSS
    assert xpath.kind is QueryKind.XPATH
    assert css != xpath


def test_find_never_touches_the_driver(page: Page, driver: FakeDriver) -> None:
    page.find("#missing")
    page.find_xpath("//missing")
    page.find_js_path("document.body")
    assert driver.calls == []


def test_close_window_invalidates_page_and_selections(page: Page, driver: FakeDriver) -> None:
    sel = page.find("#q")
    page.close_window()

    assert page.closed
    assert driver.closed_contexts == [1]
    with pytest.raises(PageClosedError):
        page.navigate("https://example.test")
    with pytest.raises(PageClosedError) as excinfo:
        sel.text()
    assert excinfo.value.selector == "#q"


def test_cancel_alloc_invalidates_every_tab(page: Page, driver: FakeDriver) -> None:
    other = page.open_tab()
    sel = other.find("#q")

    page.cancel_alloc()

    assert page.closed and other.closed
    for call in (page.html, other.url, sel.click, lambda: sel.send_keys("x")):
        with pytest.raises(PageClosedError):
            call()


def test_close_tears_down_both_scopes_once(page: Page, driver: FakeDriver) -> None:
    page.close()
    page.close()
    assert driver.names() == ["close_context", "stop"]


def test_context_manager_closes() -> None:
    d = FakeDriver()
    with Page.new(driver_factory=lambda **_: d) as page:
        page.navigate("https://example.test")
    assert page.closed
    assert not d.running


def test_selection_does_not_keep_page_alive() -> None:
    d = FakeDriver()
    page = Page.new(driver_factory=lambda **_: d)
    sel = page.find("#q")
    del page
    gc.collect()

    with pytest.raises(PageClosedError):
        sel.page


def test_close_stops_driver_even_after_browser_died(page: Page, driver: FakeDriver) -> None:
    driver.running = False  # browser crashed or disconnected on its own

    page.close()
    page.close()

    assert page.closed
    assert driver.names() == ["stop"]
