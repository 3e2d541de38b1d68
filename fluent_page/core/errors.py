"""
Error taxonomy for fluent-page.

- FluentPageError: base class, carries action/selector/url/details/cause
- LaunchError: browser process or session could not start
- NavigationError: page failed to load the requested URL
- ElementNotFoundError / WaitTimeoutError: selector matched nothing, or the
  match never became visible within the driver's wait budget
- PathError: upload file path could not be made absolute
- ScriptError: evaluated script raised on the page
- UndefinedResultIgnored: script evaluated to `undefined` (swallowed by run_script)
- PageClosedError: operation on a torn-down page
- DriverError: any other driver failure
- ActionExecutionError: a scripted action failed
"""
# @file purpose: Define error taxonomy for fluent-page.

from typing import Any


class FluentPageError(Exception):
    """
    Base class for all custom errors in fluent-page.
    Context fields are optional so every layer can attach what it knows.
    """

    def __init__(
        self,
        message: str,
        *,
        action: str | None = None,
        selector: str | None = None,
        url: str | None = None,
        details: dict[str, Any] | None = None,
        cause: BaseException | None = None,
    ) -> None:
        super().__init__(message)
        self.action: str | None = action
        self.selector: str | None = selector
        self.url: str | None = url
        self.details: dict[str, Any] = details or {}
        self.cause: BaseException | None = cause

    def __str__(self) -> str:
        msg = super().__str__()
        parts = [f"[{self.action}] {msg}" if self.action else msg]
        if self.selector:
            parts.append(f"selector={self.selector}")
        if self.url:
            parts.append(f"url={self.url}")
        if self.details:
            kv = ", ".join(f"{k}={v!r}" for k, v in self.details.items())
            parts.append(f"details={{ {kv} }}")
        return " | ".join(parts)


class LaunchError(FluentPageError):
    """Raised when the browser process or session cannot be started."""


class NavigationError(FluentPageError):
    """Raised when a page fails to load (network error, bad URL, timeout)."""


class ElementNotFoundError(FluentPageError):
    """Raised when a selector matches no element."""


class WaitTimeoutError(FluentPageError):
    """Raised when a matched element never becomes visible in time."""


class PathError(FluentPageError):
    """Raised when a file path cannot be resolved to an absolute path."""


class ScriptError(FluentPageError):
    """Raised when evaluated script throws inside the page."""


class UndefinedResultIgnored(ScriptError):
    """
    Script evaluated to `undefined`.
    Page.run_script treats this as success; whether that is always benign is
    not verified, so it stays a distinct kind instead of a silent None.
    """


class PageClosedError(FluentPageError):
    """Raised when a page (or the browser it came from) was already torn down."""


class DriverError(FluentPageError):
    """Raised for driver failures that fit no other kind."""


class ActionExecutionError(FluentPageError):
    """Raised when a scripted action fails; wraps the underlying error."""

    def __init__(self, action: str, message: str, **kwargs: Any) -> None:
        super().__init__(message, action=action, **kwargs)
