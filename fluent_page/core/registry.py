"""
Named page actions, so page scripts can be written as JSON.

Each name maps to one ActionMeta holding the callable and, optionally, the
pydantic params model its args are validated against. Names are unique:
registering a second action under a taken name is a programming error.
"""
# @file purpose: Name -> page action lookup and offline spec validation.

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple, Type

from pydantic import BaseModel, TypeAdapter

from .action import ActionSpec

# fn(page, params) -> ActionResult
ActionFn = Callable[..., Any]


@dataclass(frozen=True)
class ActionMeta:
    name: str
    fn: ActionFn
    params_model: Optional[Type[BaseModel]] = None

    @property
    def targets_element(self) -> bool:
        """True when the action resolves a Selection (its args carry a selector)."""
        return self.params_model is not None and "selector" in self.params_model.model_fields


_ACTIONS: Dict[str, ActionMeta] = {}


def action(
    name: str, *, params_model: Optional[Type[BaseModel]] = None
) -> Callable[[ActionFn], ActionFn]:
    """
        @action("navigate", params_model=NavigateParams)
        def navigate(page, params): ...
    """

    def deco(fn: ActionFn) -> ActionFn:
        if name in _ACTIONS and _ACTIONS[name].fn is not fn:
            raise ValueError(f"action already registered: {name}")
        _ACTIONS[name] = ActionMeta(name=name, fn=fn, params_model=params_model)
        return fn

    return deco


def get_meta(name: str) -> ActionMeta:
    try:
        return _ACTIONS[name]
    except KeyError as e:
        raise KeyError(f"Action not registered: {name}") from e


def get_action(name: str) -> ActionFn:
    return get_meta(name).fn


def list_actions() -> Dict[str, ActionMeta]:
    return dict(_ACTIONS)


def validate_spec(spec: ActionSpec) -> Tuple[ActionMeta, Optional[BaseModel]]:
    """
    Check a spec without touching a browser. Raises KeyError for an unknown
    name and ValidationError when args do not fit the params model. Actions
    without a params model take no args; any given are ignored.
    """
    meta = get_meta(spec.name)
    if meta.params_model is None:
        return meta, None
    return meta, TypeAdapter(meta.params_model).validate_python(spec.args)
