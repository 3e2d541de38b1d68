"""
Structured action return value, reported up to the runner/CLI.
"""
# @file purpose: Define ActionResult model for action outputs.

from __future__ import annotations

from typing import Any, Optional
from pydantic import BaseModel, Field


class ActionResult(BaseModel):
    """
    Uniform action return value:
    - ok: whether the action succeeded
    - extracted_content: value read by a read action (text/value/html/...), else None
    - meta: diagnostics (selector, url, ...) for logs and the results table
    """

    ok: bool = True
    extracted_content: Optional[Any] = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def success(cls, **meta: Any) -> "ActionResult":
        return cls(ok=True, meta=meta)

    @classmethod
    def extracted(cls, content: Any, **meta: Any) -> "ActionResult":
        return cls(ok=True, extracted_content=content, meta=meta)
