"""
Cancellation, hooks and debug trace examples.

Demonstrates:
- Aborting an in-flight request with AbortController
- Handling TransportFailure at the call site
- Lifecycle hooks
- Inspecting the debug trace
"""

import asyncio
import logging

import httpx

from fetch_pipeline import (
    POST,
    AbortController,
    AfterRequest,
    HttpxTransport,
    RequestAborted,
    RequestContext,
    TransportFailure,
    abortable,
    bind,
    json,
)

from server import app

logging.basicConfig(level=logging.DEBUG)


async def report(ctx: RequestContext) -> None:
    trace = ctx.state.get("trace")
    if trace is not None:
        print(f"{ctx.url}: {trace.outcome} in {trace.total_duration_ms:.1f}ms")
        for entry in trace.entries:
            print(f"  [{entry.position}] {entry.middleware_name} {entry.outcome}")


async def main() -> None:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
    async with HttpxTransport(client) as transport:
        api = bind(
            "http://demo.local/api",
            transport=transport,
            hooks=[AfterRequest(report)],
            debug=True,
        )
        for attempt in range(3):
            controller = AbortController()
            asyncio.get_running_loop().call_later(0.5, controller.abort, "timeout")
            try:
                response = await api(
                    f"/jobs/{attempt}", POST, json({"n": attempt}), abortable(controller)
                )
                print(response.status_code, response.json())
            except TransportFailure as exc:
                if isinstance(exc.cause, RequestAborted):
                    print(f"attempt {attempt} aborted: {exc.cause.reason}")
                else:
                    raise


if __name__ == "__main__":
    asyncio.run(main())
