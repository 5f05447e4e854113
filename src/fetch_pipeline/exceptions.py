"""FetchError hierarchy raised by the request pipeline."""

from __future__ import annotations

from typing import Any


class FetchError(Exception):
    """Base for all pipeline exceptions."""

    def __init__(self, detail: str) -> None:
        super().__init__(detail)
        self.detail = detail


class InvalidAddress(FetchError):
    """Base address and endpoint do not resolve to an absolute URL."""

    def __init__(self, address: str, detail: str | None = None) -> None:
        super().__init__(detail or f"Invalid absolute URL: {address!r}")
        self.address = address


class InvalidToken(FetchError, ValueError):
    """A request field holds a value outside its closed set of wire tokens."""

    def __init__(self, field: str, value: Any) -> None:
        super().__init__(f"Invalid {field} token: {value!r}")
        self.field = field
        self.value = value


class NoTransportConfigured(FetchError):
    """Commit attempted with neither an injected nor a registered transport."""

    def __init__(self, detail: str = "No transport configured") -> None:
        super().__init__(detail)


class MiddlewareFault(FetchError):
    """Chain element that cannot be invoked as middleware."""

    def __init__(self, element: Any, position: int) -> None:
        super().__init__(
            f"Chain element at position {position} is not callable: {element!r}"
        )
        self.element = element
        self.position = position


class AlreadyCommitted(FetchError):
    """commit() called a second time on the same context."""

    def __init__(self, detail: str = "Request context already committed") -> None:
        super().__init__(detail)


class TransportFailure(FetchError):
    """Wraps any error raised by the underlying transport."""

    def __init__(self, detail: str, *, cause: BaseException | None = None) -> None:
        super().__init__(detail)
        self.cause = cause


class RequestAborted(FetchError):
    """The request's abort signal fired before the response arrived."""

    def __init__(self, detail: str = "Request aborted", *, reason: Any = None) -> None:
        super().__init__(detail)
        self.reason = reason


class RedirectRejected(FetchError):
    """Redirect policy is ``error`` and the server answered with a redirect."""

    def __init__(self, status_code: int, location: str | None) -> None:
        super().__init__(f"Unexpected redirect ({status_code}) to {location!r}")
        self.status_code = status_code
        self.location = location
