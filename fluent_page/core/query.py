"""
Selector kinds and target classification.

- QueryKind: how a selector string is resolved (CSS query, XPath search, JS path)
- TargetKind: what kind of element a selection is meant to hit
"""
# @file purpose: Selector kinds shared by Page, Selection and drivers.

from __future__ import annotations

from enum import Enum


class QueryKind(str, Enum):
    CSS = "css"
    XPATH = "xpath"
    JS_PATH = "js_path"


class TargetKind(str, Enum):
    OPTION = "option"
    GENERIC = "generic"


def classify_target(selector: str, explicit: TargetKind | None = None) -> TargetKind:
    """
    Decide whether a selector addresses an <option>.

    An explicit tag wins. Without one, any selector containing the substring
    "option" is treated as an option (so "#optional-field" matches too).
    """
    if explicit is not None:
        return explicit
    return TargetKind.OPTION if "option" in selector else TargetKind.GENERIC
