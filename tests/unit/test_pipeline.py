"""Tests for the Pipeline executor."""

from __future__ import annotations

import logging
from typing import Any
from unittest.mock import AsyncMock

import pytest

from fetch_pipeline.chain import flatten
from fetch_pipeline.context import RequestContext
from fetch_pipeline.enums import Method
from fetch_pipeline.exceptions import (
    AlreadyCommitted,
    MiddlewareFault,
    TransportFailure,
)
from fetch_pipeline.middlewares.methods import POST
from fetch_pipeline.pipeline import Pipeline, PipelineState
from fetch_pipeline.trace import PipelineTrace


def _recorder(log: list[str], name: str) -> Any:
    async def middleware(ctx: RequestContext, next: Any) -> Any:
        log.append(f"{name}:before")
        result = await next()
        log.append(f"{name}:after")
        return result

    middleware.__qualname__ = name
    return middleware


@pytest.fixture
def ctx(mock_transport: AsyncMock) -> RequestContext:
    return RequestContext.create("http://api.test", "/items", transport=mock_transport)


class TestExecutionOrder:
    async def test_each_middleware_runs_once_in_order(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        log: list[str] = []
        chain = [_recorder(log, name) for name in ("a", "b", "c")]
        await Pipeline(ctx, chain).run()
        assert log == [
            "a:before",
            "b:before",
            "c:before",
            "c:after",
            "b:after",
            "a:after",
        ]
        mock_transport.assert_awaited_once()

    async def test_commit_happens_between_before_and_after(
        self, ctx: RequestContext
    ) -> None:
        log: list[str] = []

        async def transport(url: str, descriptor: Any) -> str:
            log.append("commit")
            return "response"

        ctx.transport = transport
        await Pipeline(ctx, [_recorder(log, "a"), _recorder(log, "b")]).run()
        assert log == ["a:before", "b:before", "commit", "b:after", "a:after"]

    async def test_response_propagates_to_every_frame(
        self, ctx: RequestContext
    ) -> None:
        seen: list[Any] = []

        async def observe(ctx: RequestContext, next: Any) -> Any:
            response = await next()
            seen.append(response)
            return response

        result = await Pipeline(ctx, [observe, observe]).run()
        assert seen == [result, result]
        assert result is ctx.response

    async def test_nested_and_flat_chains_are_equivalent(
        self, mock_transport: AsyncMock
    ) -> None:
        flat_log: list[str] = []
        nested_log: list[str] = []
        a, b, c = (_recorder(flat_log, n) for n in ("a", "b", "c"))
        na, nb, nc = (_recorder(nested_log, n) for n in ("a", "b", "c"))

        flat_ctx = RequestContext.create("http://api.test", transport=mock_transport)
        nested_ctx = RequestContext.create("http://api.test", transport=mock_transport)
        flat = await Pipeline(flat_ctx, flatten([a, b, c])).run()
        nested = await Pipeline(nested_ctx, flatten([[na, [nb]], [[nc]]])).run()

        assert flat_log == nested_log
        assert flat.url == nested.url
        assert flat.descriptor == nested.descriptor

    async def test_empty_chain_commits_directly(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        response = await Pipeline(ctx, []).run()
        mock_transport.assert_awaited_once()
        assert response is ctx.response

    async def test_sync_middleware_returning_next(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        def passthrough(ctx: RequestContext, next: Any) -> Any:
            ctx.header("X-Sync", "1")
            return next()

        response = await Pipeline(ctx, [passthrough]).run()
        mock_transport.assert_awaited_once()
        assert response.descriptor.headers == {"X-Sync": "1"}


class TestMutationVisibility:
    async def test_downstream_observes_upstream_write(self, ctx: RequestContext) -> None:
        observed: list[Method] = []

        async def read_method(ctx: RequestContext, next: Any) -> Any:
            observed.append(ctx.method)
            return await next()

        await Pipeline(ctx, [POST, read_method]).run()
        assert observed == [Method.POST]

    async def test_upstream_does_not_observe_later_write(
        self, mock_transport: AsyncMock
    ) -> None:
        observed: list[Method] = []

        async def read_method(ctx: RequestContext, next: Any) -> Any:
            observed.append(ctx.method)
            return await next()

        ctx = RequestContext.create("http://api.test", transport=mock_transport)
        await Pipeline(ctx, [read_method, POST]).run()
        assert observed == [Method.GET]

    async def test_transport_sees_all_mutations(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        async def shape(ctx: RequestContext, next: Any) -> Any:
            ctx.header("Accept", "application/json")
            ctx.body = b"{}"
            return await next()

        await Pipeline(ctx, [POST, shape]).run()
        _, descriptor = mock_transport.await_args.args
        assert descriptor.method is Method.POST
        assert descriptor.headers == {"Accept": "application/json"}
        assert descriptor.body == b"{}"


class TestShortCircuit:
    async def test_never_calling_next_prevents_commit(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        downstream = AsyncMock()

        async def cached(ctx: RequestContext, next: Any) -> str:
            return "cached"

        result = await Pipeline(ctx, [cached, downstream]).run()
        assert result == "cached"
        mock_transport.assert_not_awaited()
        downstream.assert_not_awaited()
        assert ctx.committed is False
        assert ctx.response is None

    async def test_sync_middleware_plain_value(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        result = await Pipeline(ctx, [lambda ctx, next: {"offline": True}]).run()
        assert result == {"offline": True}
        mock_transport.assert_not_awaited()

    async def test_upstream_receives_short_circuit_value(
        self, ctx: RequestContext
    ) -> None:
        seen: list[Any] = []

        async def outer(ctx: RequestContext, next: Any) -> Any:
            value = await next()
            seen.append(value)
            return value

        async def stop(ctx: RequestContext, next: Any) -> int:
            return 304

        assert await Pipeline(ctx, [outer, stop]).run() == 304
        assert seen == [304]


class TestRepeatedNext:
    async def test_second_next_replays_and_faults_on_commit(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        calls: list[str] = []

        async def twice(ctx: RequestContext, next: Any) -> Any:
            await next()
            return await next()

        async def downstream(ctx: RequestContext, next: Any) -> Any:
            calls.append("downstream")
            return await next()

        with pytest.raises(AlreadyCommitted):
            await Pipeline(ctx, [twice, downstream]).run()
        assert calls == ["downstream", "downstream"]
        assert mock_transport.await_count == 1

    async def test_replay_can_be_recovered_by_middleware(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        async def retry_once(ctx: RequestContext, next: Any) -> Any:
            first = await next()
            try:
                return await next()
            except AlreadyCommitted:
                return first

        response = await Pipeline(ctx, [retry_once]).run()
        assert response is ctx.response
        assert mock_transport.await_count == 1

    async def test_replay_logs_warning(
        self, ctx: RequestContext, caplog: pytest.LogCaptureFixture
    ) -> None:
        async def twice(ctx: RequestContext, next: Any) -> Any:
            await next()
            try:
                return await next()
            except AlreadyCommitted:
                return None

        with caplog.at_level(logging.WARNING, logger="fetch_pipeline.pipeline"):
            await Pipeline(ctx, [twice]).run()
        assert any("called next() 2 times" in r.getMessage() for r in caplog.records)


class TestErrors:
    async def test_non_callable_element_faults_at_its_position(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        log: list[str] = []
        chain = [_recorder(log, "a"), 42, _recorder(log, "c")]
        with pytest.raises(MiddlewareFault) as exc_info:
            await Pipeline(ctx, chain).run()
        assert exc_info.value.position == 1
        assert exc_info.value.element == 42
        assert log == ["a:before"]
        mock_transport.assert_not_awaited()

    async def test_middleware_error_propagates_unchanged(
        self, ctx: RequestContext, mock_transport: AsyncMock
    ) -> None:
        log: list[str] = []

        async def boom(ctx: RequestContext, next: Any) -> Any:
            raise ValueError("bad payload")

        with pytest.raises(ValueError, match="bad payload"):
            await Pipeline(ctx, [_recorder(log, "a"), boom]).run()
        assert log == ["a:before"]
        mock_transport.assert_not_awaited()

    async def test_transport_failure_reaches_upstream_next(
        self, ctx: RequestContext
    ) -> None:
        original = TimeoutError("read timeout")
        ctx.transport = AsyncMock(side_effect=original)
        caught: list[BaseException] = []

        async def observe(ctx: RequestContext, next: Any) -> Any:
            try:
                return await next()
            except TransportFailure as exc:
                caught.append(exc)
                raise

        with pytest.raises(TransportFailure) as exc_info:
            await Pipeline(ctx, [observe]).run()
        assert caught == [exc_info.value]
        assert exc_info.value.cause is original

    async def test_upstream_can_recover_from_failure(self, ctx: RequestContext) -> None:
        ctx.transport = AsyncMock(side_effect=ConnectionError("down"))

        async def fallback(ctx: RequestContext, next: Any) -> Any:
            try:
                return await next()
            except TransportFailure:
                return "fallback"

        assert await Pipeline(ctx, [fallback]).run() == "fallback"


class TestStateMachine:
    async def test_initial_state(self, ctx: RequestContext) -> None:
        pipeline = Pipeline(ctx, [])
        assert pipeline.state is PipelineState.PENDING
        assert pipeline.position is None

    async def test_states_observed_during_run(self, ctx: RequestContext) -> None:
        observed: list[tuple[PipelineState, int | None]] = []
        pipeline: Pipeline

        async def observe_state(ctx: RequestContext, next: Any) -> Any:
            observed.append((pipeline.state, pipeline.position))
            result = await next()
            observed.append((pipeline.state, pipeline.position))
            return result

        async def transport(url: str, descriptor: Any) -> str:
            observed.append((pipeline.state, pipeline.position))
            return "ok"

        ctx.transport = transport
        pipeline = Pipeline(ctx, [observe_state, observe_state])
        await pipeline.run()

        assert observed == [
            (PipelineState.RUNNING, 0),
            (PipelineState.RUNNING, 1),
            (PipelineState.COMMITTING, None),
            (PipelineState.RUNNING, 1),
            (PipelineState.RUNNING, 0),
        ]
        assert pipeline.state is PipelineState.DONE

    async def test_done_after_failure(self, ctx: RequestContext) -> None:
        pipeline = Pipeline(ctx, [None])
        with pytest.raises(MiddlewareFault):
            await pipeline.run()
        assert pipeline.state is PipelineState.DONE

    async def test_run_twice_rejected(self, ctx: RequestContext) -> None:
        pipeline = Pipeline(ctx, [])
        await pipeline.run()
        with pytest.raises(RuntimeError):
            await pipeline.run()


class TestDebugTrace:
    async def test_debug_records_trace(self, ctx: RequestContext) -> None:
        log: list[str] = []
        await Pipeline(ctx, [_recorder(log, "a"), _recorder(log, "b")], debug=True).run()
        trace = ctx.state["trace"]
        assert isinstance(trace, PipelineTrace)
        assert [e.middleware_name for e in trace.entries] == ["a", "b"]
        assert [e.position for e in trace.entries] == [0, 1]
        assert all(e.outcome == "OK" for e in trace.entries)
        assert trace.outcome == "OK"
        assert trace.committed is True
        assert trace.total_duration_ms >= 0

    async def test_no_trace_without_debug(self, ctx: RequestContext) -> None:
        await Pipeline(ctx, []).run()
        assert "trace" not in ctx.state

    async def test_short_circuit_outcome(self, ctx: RequestContext) -> None:
        async def stop(ctx: RequestContext, next: Any) -> None:
            return None

        await Pipeline(ctx, [stop], debug=True).run()
        trace = ctx.state["trace"]
        assert trace.outcome == "SHORT_CIRCUITED"
        assert trace.committed is False

    async def test_error_outcome_marks_failed_frames(self, ctx: RequestContext) -> None:
        ctx.transport = AsyncMock(side_effect=ConnectionError("down"))
        log: list[str] = []
        with pytest.raises(TransportFailure):
            await Pipeline(ctx, [_recorder(log, "a")], debug=True).run()
        trace = ctx.state["trace"]
        assert trace.outcome == "ERROR"
        assert isinstance(trace.error, TransportFailure)
        assert trace.entries[0].outcome == "FAILED"
        assert "down" in (trace.entries[0].reason or "")
