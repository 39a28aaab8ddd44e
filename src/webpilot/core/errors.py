"""webpilot · Error Hierarchy.

Provides a closed set of error kinds for everything that can go wrong
while driving the browser. Every custom exception inherits from
WebpilotError, which carries its ErrorKind, an error_code and an optional
details dict for programmatic handling.

Tool handlers never let these escape: they are converted into failure
envelopes at the tool boundary, so callers test ``errorKind`` instead of
matching on message wording.

Usage::

    from webpilot.core.errors import NoActiveSessionError

    raise NoActiveSessionError()
    raise ElementNotFoundError("css=#missing", timeout_ms=10_000)
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed enumeration of failure categories reported to callers."""

    NO_ACTIVE_SESSION = "no_active_session"
    SESSION_ALREADY_ACTIVE = "session_already_active"
    UNSUPPORTED_BROWSER = "unsupported_browser"
    UNSUPPORTED_LOCATOR_STRATEGY = "unsupported_locator_strategy"
    SESSION_LAUNCH = "session_launch"
    ELEMENT_NOT_FOUND = "element_not_found"
    DRIVER_OPERATION = "driver_operation"


class WebpilotError(Exception):
    """Base exception for all webpilot errors."""

    kind: ErrorKind = ErrorKind.DRIVER_OPERATION

    def __init__(
        self,
        message: str,
        error_code: str = "WEBPILOT_ERROR",
        details: dict | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}


class NoActiveSessionError(WebpilotError):
    """A tool needed a browser session but none has been opened."""

    kind = ErrorKind.NO_ACTIVE_SESSION

    def __init__(
        self,
        message: str = "No active browser session. Please open a browser first.",
        error_code: str = "NO_ACTIVE_SESSION",
        details: dict | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)


class SessionAlreadyActiveError(WebpilotError):
    """open_browser was called while a session is still running."""

    kind = ErrorKind.SESSION_ALREADY_ACTIVE

    def __init__(
        self,
        browser: str,
        error_code: str = "SESSION_ALREADY_ACTIVE",
        details: dict | None = None,
    ) -> None:
        super().__init__(
            f"A '{browser}' browser session is already active. Close it first.",
            error_code=error_code,
            details={"browser": browser, **(details or {})},
        )


class UnsupportedBrowserError(WebpilotError):
    """Browser kind outside of chrome, firefox and edge."""

    kind = ErrorKind.UNSUPPORTED_BROWSER

    def __init__(
        self,
        browser: str,
        error_code: str = "UNSUPPORTED_BROWSER",
        details: dict | None = None,
    ) -> None:
        super().__init__(
            f"Unsupported browser: {browser}",
            error_code=error_code,
            details={"browser": browser, **(details or {})},
        )


class UnsupportedLocatorStrategyError(WebpilotError):
    """Locator strategy outside of id, css, xpath, name, tag and class."""

    kind = ErrorKind.UNSUPPORTED_LOCATOR_STRATEGY

    def __init__(
        self,
        strategy: str,
        error_code: str = "UNSUPPORTED_LOCATOR_STRATEGY",
        details: dict | None = None,
    ) -> None:
        super().__init__(
            f"Unsupported locator strategy: {strategy}",
            error_code=error_code,
            details={"strategy": strategy, **(details or {})},
        )


class SessionLaunchError(WebpilotError):
    """The browser process or its driver failed to start."""

    kind = ErrorKind.SESSION_LAUNCH

    def __init__(
        self,
        message: str,
        error_code: str = "SESSION_LAUNCH_FAILED",
        details: dict | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)


class ElementNotFoundError(WebpilotError):
    """The element did not appear before the wait deadline."""

    kind = ErrorKind.ELEMENT_NOT_FOUND

    def __init__(
        self,
        selector: str,
        timeout_ms: int,
        error_code: str = "ELEMENT_NOT_FOUND",
        details: dict | None = None,
    ) -> None:
        super().__init__(
            f"Element not found within {timeout_ms} ms: {selector}",
            error_code=error_code,
            details={"selector": selector, "timeout_ms": timeout_ms, **(details or {})},
        )


class DriverOperationError(WebpilotError):
    """Any other failure surfaced by the browser-automation layer."""

    kind = ErrorKind.DRIVER_OPERATION

    def __init__(
        self,
        message: str,
        error_code: str = "DRIVER_OPERATION_FAILED",
        details: dict | None = None,
    ) -> None:
        super().__init__(message, error_code=error_code, details=details)


def error_kind_of(exc: BaseException) -> ErrorKind:
    """Ordnet eine beliebige Exception einer ErrorKind zu."""
    if isinstance(exc, WebpilotError):
        return exc.kind
    return ErrorKind.DRIVER_OPERATION
