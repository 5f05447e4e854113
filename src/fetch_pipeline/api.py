"""bind() — factory producing reusable request invocation callables."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import TYPE_CHECKING, Any

from fetch_pipeline.chain import flatten
from fetch_pipeline.context import RequestContext
from fetch_pipeline.hooks import PipelineHook
from fetch_pipeline.pipeline import Pipeline

if TYPE_CHECKING:
    from fetch_pipeline._types import Transport

logger = logging.getLogger("fetch_pipeline.api")


class Api:
    """Invocation function bound to a base address.

    ``await api("/users", POST, json(payload))`` resolves the endpoint
    against the base address, runs the middleware and returns the
    transport's response. Without a leading string the base address itself
    is requested.
    """

    def __init__(
        self,
        base_address: str,
        *,
        transport: Transport | None = None,
        hooks: Iterable[PipelineHook] = (),
        debug: bool = False,
    ) -> None:
        self.base_address = base_address
        self.transport = transport
        self._hooks: list[PipelineHook] = list(hooks)
        self._debug = debug

    def add_hook(self, hook: PipelineHook) -> Api:
        self._hooks.append(hook)
        return self

    def context(self, endpoint: str | None = None) -> RequestContext:
        return RequestContext.create(
            self.base_address, endpoint, transport=self.transport
        )

    async def __call__(self, *args: Any) -> Any:
        if args and isinstance(args[0], str):
            endpoint: str | None = args[0]
            elements = args[1:]
        else:
            endpoint = None
            elements = args

        ctx = self.context(endpoint)
        pipeline = Pipeline(
            ctx, flatten(elements), hooks=self._hooks, debug=self._debug
        )
        logger.debug("Running %d middleware for %s", len(pipeline.middlewares), ctx.url)
        return await pipeline.run()

    def __repr__(self) -> str:
        return f"Api({self.base_address!r})"


def bind(
    base_address: str,
    *,
    transport: Transport | None = None,
    hooks: Iterable[PipelineHook] = (),
    debug: bool = False,
) -> Api:
    """Return an Api bound to ``base_address``."""
    return Api(base_address, transport=transport, hooks=hooks, debug=debug)


get_api = bind
