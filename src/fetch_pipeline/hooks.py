"""PipelineHook base and callback-driven hooks."""

from __future__ import annotations

import inspect
from collections.abc import Callable
from typing import Any

from fetch_pipeline.context import RequestContext


class PipelineHook:
    """Base abstraction for lifecycle hooks. All methods are no-op by default."""

    async def on_request_start(self, ctx: RequestContext) -> None:
        pass

    async def on_request_end(self, ctx: RequestContext) -> None:
        pass

    async def on_middleware(
        self,
        ctx: RequestContext,
        middleware: Any,
        position: int,
        error: BaseException | None,
    ) -> None:
        pass


class CallbackHook(PipelineHook):
    """Hook assembled from optional callbacks, sync or async.

    ``on_middleware`` receives ``(ctx, middleware, position, error)`` as each
    frame unwinds; ``position`` is the index in the flattened chain.
    """

    def __init__(
        self,
        *,
        on_start: Callable[[RequestContext], Any] | None = None,
        on_end: Callable[[RequestContext], Any] | None = None,
        on_middleware: Callable[..., Any] | None = None,
    ) -> None:
        self._on_start = on_start
        self._on_end = on_end
        self._on_middleware = on_middleware

    async def on_request_start(self, ctx: RequestContext) -> None:
        if self._on_start is not None:
            await _maybe_await(self._on_start(ctx))

    async def on_request_end(self, ctx: RequestContext) -> None:
        if self._on_end is not None:
            await _maybe_await(self._on_end(ctx))

    async def on_middleware(
        self,
        ctx: RequestContext,
        middleware: Any,
        position: int,
        error: BaseException | None,
    ) -> None:
        if self._on_middleware is not None:
            await _maybe_await(self._on_middleware(ctx, middleware, position, error))

    def __repr__(self) -> str:
        wired = [
            name
            for name, callback in (
                ("on_start", self._on_start),
                ("on_end", self._on_end),
                ("on_middleware", self._on_middleware),
            )
            if callback is not None
        ]
        return f"CallbackHook({', '.join(wired)})"


def BeforeRequest(callback: Callable[[RequestContext], Any]) -> CallbackHook:  # noqa: N802
    """Hook that fires before the first middleware runs."""
    return CallbackHook(on_start=callback)


def AfterRequest(callback: Callable[[RequestContext], Any]) -> CallbackHook:  # noqa: N802
    """Hook that fires once the pipeline has finished, even on error."""
    return CallbackHook(on_end=callback)


def AfterMiddleware(callback: Callable[..., Any]) -> CallbackHook:  # noqa: N802
    return CallbackHook(on_middleware=callback)


async def _maybe_await(result: Any) -> None:
    if inspect.isawaitable(result):
        await result
