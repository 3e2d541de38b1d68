"""
Input models: Pydantic v2 constraints for scripted page actions.
Why: validate at the JSON -> executor boundary so bad steps fail before a browser starts.
Includes:
- NavigateParams { url: AnyHttpUrl }
- ElementParams { selector: NonEmptyStr, by: css|xpath, target?: option|generic }
- SendKeysParams / UploadFileParams / AttributeParams extend ElementParams
- ShadowKeysParams { selector: JS path expression, keys }
- ScriptParams { script: NonEmptyStr }
"""
# @file purpose: Define parameter schemas for page actions using Pydantic v2.

from typing import Annotated, Literal

from pydantic import AnyHttpUrl, BaseModel, StringConstraints

NonEmptyStr = Annotated[str, StringConstraints(min_length=1, strip_whitespace=True)]
TextLimited = Annotated[str, StringConstraints(max_length=4000)]


class NavigateParams(BaseModel):
    """Parameters for navigate action."""

    url: AnyHttpUrl


class ElementParams(BaseModel):
    """Any action addressing one element."""

    selector: NonEmptyStr
    by: Literal["css", "xpath"] = "css"
    target: Literal["option", "generic"] | None = None


class SendKeysParams(ElementParams):
    keys: TextLimited


class ShadowKeysParams(BaseModel):
    """Selector is a JS expression yielding the element, e.g. through shadowRoot."""

    selector: NonEmptyStr
    keys: TextLimited


class UploadFileParams(ElementParams):
    filename: NonEmptyStr


class AttributeParams(ElementParams):
    name: NonEmptyStr


class ScriptParams(BaseModel):
    script: NonEmptyStr
