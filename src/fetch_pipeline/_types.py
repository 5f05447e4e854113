"""Shared type aliases and protocols."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, Protocol

if TYPE_CHECKING:
    from fetch_pipeline.context import RequestContext, RequestDescriptor

# Zero-argument continuation that runs the rest of the chain
Next = Callable[[], Awaitable[Any]]

# A middleware may be a coroutine function or return an awaitable (e.g. ``next()``)
Middleware = Callable[["RequestContext", Next], Any]


class Transport(Protocol):
    """Callable performing the actual HTTP exchange."""

    def __call__(self, url: str, descriptor: RequestDescriptor) -> Awaitable[Any]: ...
