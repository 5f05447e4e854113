"""Pipeline — sequential executor driving middleware towards a single commit."""

from __future__ import annotations

import inspect
import logging
import time
from collections.abc import Iterable
from enum import Enum
from typing import Any

from fetch_pipeline.context import RequestContext
from fetch_pipeline.exceptions import MiddlewareFault
from fetch_pipeline.hooks import PipelineHook
from fetch_pipeline.trace import PipelineTrace, TraceEntry

logger = logging.getLogger("fetch_pipeline.pipeline")


class PipelineState(Enum):
    """Execution states of a single pipeline run."""

    PENDING = "pending"
    RUNNING = "running"
    COMMITTING = "committing"
    DONE = "done"


class Pipeline:
    """Runs a flattened middleware sequence against one context.

    Each middleware receives ``(ctx, next)``. Calling ``next()`` dispatches the
    following position; once the sequence is exhausted the context is
    committed and the transport's response travels back up through every
    pending ``next()`` call. A middleware that never calls ``next()`` ends the
    run with its own return value, and one that calls it twice replays the
    remainder of the chain.
    """

    def __init__(
        self,
        ctx: RequestContext,
        middlewares: Iterable[Any],
        *,
        hooks: Iterable[PipelineHook] = (),
        debug: bool = False,
    ) -> None:
        self.ctx = ctx
        self.middlewares: tuple[Any, ...] = tuple(middlewares)
        self.hooks: tuple[PipelineHook, ...] = tuple(hooks)
        self.debug = debug
        self.state = PipelineState.PENDING
        self.position: int | None = None
        self.trace: PipelineTrace | None = PipelineTrace() if debug else None

    async def run(self) -> Any:
        if self.state is not PipelineState.PENDING:
            raise RuntimeError(f"Pipeline already {self.state.value}")

        for hook in self.hooks:
            await hook.on_request_start(self.ctx)

        started = time.perf_counter()
        try:
            result = await self._dispatch(0)
        except Exception as exc:
            if self.trace is not None:
                self.trace.outcome = "ERROR"
                self.trace.error = exc
            raise
        else:
            if not self.ctx.committed:
                logger.debug("Chain short-circuited, %s not sent", self.ctx.url)
                if self.trace is not None:
                    self.trace.outcome = "SHORT_CIRCUITED"
            return result
        finally:
            self.state = PipelineState.DONE
            self.position = None
            if self.trace is not None:
                self.trace.total_duration_ms = (time.perf_counter() - started) * 1000
                self.trace.committed = self.ctx.committed
                self.trace.entries.sort(key=lambda entry: entry.position)
                self.ctx.state["trace"] = self.trace
            for hook in self.hooks:
                await hook.on_request_end(self.ctx)

    async def _dispatch(self, index: int) -> Any:
        if index >= len(self.middlewares):
            self.state = PipelineState.COMMITTING
            self.position = None
            return await self.ctx.commit()

        middleware = self.middlewares[index]
        if not callable(middleware):
            raise MiddlewareFault(middleware, index)

        self.state = PipelineState.RUNNING
        self.position = index
        calls = 0

        async def next_() -> Any:
            nonlocal calls
            calls += 1
            if calls > 1:
                logger.warning(
                    "%s called next() %d times, replaying the rest of the chain",
                    _name(middleware),
                    calls,
                )
            try:
                return await self._dispatch(index + 1)
            finally:
                self.state = PipelineState.RUNNING
                self.position = index

        logger.debug("Dispatching %s at position %d", _name(middleware), index)
        frame_start = time.perf_counter()
        try:
            result = middleware(self.ctx, next_)
            if inspect.isawaitable(result):
                result = await result
        except Exception as exc:
            self._record(middleware, index, frame_start, exc)
            for hook in self.hooks:
                await hook.on_middleware(self.ctx, middleware, index, exc)
            raise

        self._record(middleware, index, frame_start, None)
        for hook in self.hooks:
            await hook.on_middleware(self.ctx, middleware, index, None)
        return result

    def _record(
        self,
        middleware: Any,
        index: int,
        frame_start: float,
        error: BaseException | None,
    ) -> None:
        if self.trace is None:
            return
        elapsed = (time.perf_counter() - frame_start) * 1000
        self.trace.entries.append(
            TraceEntry(
                middleware_name=_name(middleware),
                position=index,
                duration_ms=elapsed,
                outcome="OK" if error is None else "FAILED",
                reason=None if error is None else str(error),
            )
        )


def _name(middleware: Any) -> str:
    return getattr(middleware, "__qualname__", None) or type(middleware).__name__
