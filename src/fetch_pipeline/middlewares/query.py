"""Query middleware — mutate the request URL's query string."""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx

if TYPE_CHECKING:
    from fetch_pipeline._types import Middleware, Next
    from fetch_pipeline.context import RequestContext


class _Undefined:
    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False


# Marks a parameter value as deliberately absent, distinct from None
UNDEFINED: Any = _Undefined()


@dataclass(frozen=True)
class QueryOptions:
    """Controls how query() writes parameters.

    ``append`` keeps existing values for a key instead of replacing them.
    ``include_null`` / ``include_undefined`` emit ``None`` / ``UNDEFINED``
    values as empty strings instead of skipping them.
    """

    append: bool = False
    include_undefined: bool = False
    include_null: bool = False


def query(
    params: Mapping[str, Any],
    options: QueryOptions | None = None,
    *,
    append: bool = False,
    include_undefined: bool = False,
    include_null: bool = False,
) -> Middleware:
    """Return middleware that writes ``params`` into the URL query string."""
    opts = options or QueryOptions(
        append=append,
        include_undefined=include_undefined,
        include_null=include_null,
    )

    async def set_query(ctx: RequestContext, next: Next) -> Any:
        url = httpx.URL(ctx.url)
        for name, value in params.items():
            if not opts.append:
                url = url.copy_remove_param(name)
            values = value if isinstance(value, (list, tuple)) else [value]
            for item in values:
                if item is UNDEFINED:
                    if not opts.include_undefined:
                        continue
                    item = ""
                elif item is None and not opts.include_null:
                    continue
                url = url.copy_add_param(name, item)
        ctx.url = url
        return await next()

    return set_query
