"""Abort support — AbortController, AbortSignal and abortable()."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from fetch_pipeline._types import Middleware, Next
    from fetch_pipeline.context import RequestContext


class AbortSignal:
    """Read side of an AbortController, observed by the transport."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self.reason: Any = None

    @property
    def aborted(self) -> bool:
        return self._event.is_set()

    async def wait(self) -> Any:
        await self._event.wait()
        return self.reason

    def _abort(self, reason: Any) -> None:
        if self._event.is_set():
            return
        self.reason = reason
        self._event.set()


class AbortController:
    """Owner of an AbortSignal. Calling abort() more than once is a no-op."""

    def __init__(self) -> None:
        self.signal = AbortSignal()

    def abort(self, reason: Any = "aborted") -> None:
        self.signal._abort(reason)


def abortable(controller: AbortController) -> Middleware:
    """Attach ``controller``'s signal to the request."""

    async def attach_signal(ctx: RequestContext, next: Next) -> Any:
        ctx.signal = controller.signal
        return await next()

    return attach_signal
