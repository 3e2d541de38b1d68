"""
Data contract for scripted page actions.
- ActionSpec: one step of a page script (name + args), as read from JSON
"""
# @file purpose: Define action data contracts.

from typing import Any

from pydantic import BaseModel, Field


class ActionSpec(BaseModel):
    name: str = Field(..., description="Registered action name.")
    args: dict[str, Any] = Field(
        default_factory=dict, description="Parameters validated by the action's params model."
    )
