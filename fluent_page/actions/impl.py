"""
Page actions bound to the fluent Page/Selection API:
- navigate / html / url / title / run_script
- click / send_keys / send_key_by_shadow_dom / upload_file / clear / remove_input
- text / value / get_input_value / attribute

Each action:
  1) Expects a Page + validated params (Pydantic v2, or None)
  2) Returns ActionResult, or raises ActionExecutionError on failure
"""

# @file purpose: Implement and register page actions.
from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

from fluent_page.core.errors import ActionExecutionError, FluentPageError
from fluent_page.core.page import Page
from fluent_page.core.query import TargetKind
from fluent_page.core.registry import action
from fluent_page.core.result import ActionResult
from fluent_page.core.selection import Selection

from .params import (
    AttributeParams,
    ElementParams,
    NavigateParams,
    ScriptParams,
    SendKeysParams,
    ShadowKeysParams,
    UploadFileParams,
)


@contextmanager
def _failing_as(name: str, message: str, *, selector: str | None = None, url: str | None = None) -> Iterator[None]:
    try:
        yield
    except FluentPageError as e:
        raise ActionExecutionError(
            action=name,
            message=message,
            selector=selector,
            url=url,
            details={"cause": str(e)},
            cause=e,
        ) from e


def _select(page: Page, params: ElementParams) -> Selection:
    target = TargetKind(params.target) if params.target else None
    if params.by == "xpath":
        return page.find_xpath(params.selector, target=target)
    return page.find(params.selector, target=target)


# ---------------- page level ----------------


@action("navigate", params_model=NavigateParams)
def navigate(page: Page, params: NavigateParams) -> ActionResult:
    with _failing_as("navigate", "failed to open url", url=str(params.url)):
        page.navigate(str(params.url))
    return ActionResult.success(step="navigate", url=str(params.url))


@action("html")
def html(page: Page, params: None = None) -> ActionResult:
    with _failing_as("html", "failed to read page html"):
        content = page.html()
    return ActionResult.extracted(content, step="html")


@action("url")
def url(page: Page, params: None = None) -> ActionResult:
    with _failing_as("url", "failed to read page url"):
        location = page.url()
    return ActionResult.extracted(location, step="url", url=location)


@action("title")
def title(page: Page, params: None = None) -> ActionResult:
    with _failing_as("title", "failed to read page title"):
        text = page.title()
    return ActionResult.extracted(text, step="title")


@action("run_script", params_model=ScriptParams)
def run_script(page: Page, params: ScriptParams) -> ActionResult:
    with _failing_as("run_script", "script failed"):
        values = page.run_script(params.script)
    return ActionResult.extracted(values, step="run_script", count=len(values))


# ---------------- element level ----------------


@action("click", params_model=ElementParams)
def click(page: Page, params: ElementParams) -> ActionResult:
    with _failing_as("click", "failed to click element", selector=params.selector):
        _select(page, params).click()
    return ActionResult.success(step="click", selector=params.selector)


@action("send_keys", params_model=SendKeysParams)
def send_keys(page: Page, params: SendKeysParams) -> ActionResult:
    with _failing_as("send_keys", "failed to input text", selector=params.selector):
        _select(page, params).send_keys(params.keys)
    return ActionResult.success(step="send_keys", selector=params.selector, length=len(params.keys))


@action("send_key_by_shadow_dom", params_model=ShadowKeysParams)
def send_key_by_shadow_dom(page: Page, params: ShadowKeysParams) -> ActionResult:
    with _failing_as("send_key_by_shadow_dom", "failed to input text", selector=params.selector):
        page.find_js_path(params.selector).send_key_by_shadow_dom(params.keys)
    return ActionResult.success(
        step="send_key_by_shadow_dom", selector=params.selector, length=len(params.keys)
    )


@action("upload_file", params_model=UploadFileParams)
def upload_file(page: Page, params: UploadFileParams) -> ActionResult:
    with _failing_as("upload_file", "failed to upload file", selector=params.selector):
        _select(page, params).upload_file(params.filename)
    return ActionResult.success(step="upload_file", selector=params.selector, file=params.filename)


@action("clear", params_model=ElementParams)
def clear(page: Page, params: ElementParams) -> ActionResult:
    with _failing_as("clear", "failed to clear element", selector=params.selector):
        _select(page, params).clear()
    return ActionResult.success(step="clear", selector=params.selector)


@action("remove_input", params_model=ElementParams)
def remove_input(page: Page, params: ElementParams) -> ActionResult:
    with _failing_as("remove_input", "failed to reset input value", selector=params.selector):
        _select(page, params).remove_input()
    return ActionResult.success(step="remove_input", selector=params.selector)


@action("text", params_model=ElementParams)
def text(page: Page, params: ElementParams) -> ActionResult:
    with _failing_as("text", "failed to extract text", selector=params.selector):
        content = _select(page, params).text()
    return ActionResult.extracted(content, step="text", selector=params.selector)


@action("value", params_model=ElementParams)
def value(page: Page, params: ElementParams) -> ActionResult:
    with _failing_as("value", "failed to read value", selector=params.selector):
        content = _select(page, params).value()
    return ActionResult.extracted(content, step="value", selector=params.selector)


@action("get_input_value", params_model=ElementParams)
def get_input_value(page: Page, params: ElementParams) -> ActionResult:
    with _failing_as("get_input_value", "failed to read value", selector=params.selector):
        content = _select(page, params).get_input_value()
    return ActionResult.extracted(content, step="get_input_value", selector=params.selector)


@action("attribute", params_model=AttributeParams)
def attribute(page: Page, params: AttributeParams) -> ActionResult:
    with _failing_as("attribute", "failed to read attribute", selector=params.selector):
        content = _select(page, params).attribute(params.name)
    return ActionResult.extracted(
        content, step="attribute", selector=params.selector, name=params.name
    )
