"""Method middleware — set the request method and continue."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fetch_pipeline.enums import Method

if TYPE_CHECKING:
    from fetch_pipeline._types import Middleware, Next
    from fetch_pipeline.context import RequestContext


def method(m: Method | str) -> Middleware:
    """Return middleware that sets the request method to ``m``."""
    token = Method(m)

    async def set_method(ctx: RequestContext, next: Next) -> Any:
        ctx.method = token
        return await next()

    set_method.__qualname__ = f"method({token.value})"
    return set_method


GET = method(Method.GET)
POST = method(Method.POST)
PUT = method(Method.PUT)
DELETE = method(Method.DELETE)
PATCH = method(Method.PATCH)
HEAD = method(Method.HEAD)
OPTIONS = method(Method.OPTIONS)
TRACE = method(Method.TRACE)
CONNECT = method(Method.CONNECT)
