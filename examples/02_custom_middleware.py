"""
Custom middleware examples.

Demonstrates:
- Writing middleware that runs before and after the request
- Grouping several steps into one reusable Chain
- Short-circuiting the chain with a cached response
- Sharing a transport process-wide with use_transport()
"""

import asyncio
import time
from typing import Any

import httpx

from fetch_pipeline import (
    POST,
    Chain,
    HttpxTransport,
    RequestContext,
    bind,
    json,
    use_transport,
)

from server import app


# ========== Header middleware ==========


def bearer(token: str):
    async def authorize(ctx: RequestContext, next) -> Any:
        ctx.header("Authorization", f"Bearer {token}")
        return await next()

    return authorize


# ========== Timing middleware ==========


async def timed(ctx: RequestContext, next) -> Any:
    start = time.perf_counter()
    response = await next()
    elapsed = (time.perf_counter() - start) * 1000
    print(f"{ctx.method} {ctx.url} -> {response.status_code} in {elapsed:.1f}ms")
    return response


# ========== Cache middleware ==========


class MemoryCache:
    """Answers repeated GETs without touching the network."""

    def __init__(self) -> None:
        self._responses: dict[str, Any] = {}

    async def __call__(self, ctx: RequestContext, next) -> Any:
        key = str(ctx.url)
        if ctx.method == "GET" and key in self._responses:
            return self._responses[key]
        response = await next()
        if ctx.method == "GET":
            self._responses[key] = response
        return response


# ========== Composed step ==========


def create_ticket(title: str) -> Chain:
    """Several steps behind one name; behaves exactly like listing them."""
    return Chain(POST, json({"title": title}), bearer("secret"))


async def main() -> None:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
    async with HttpxTransport(client) as transport:
        use_transport(transport)
        api = bind("http://demo.local/api")
        cache = MemoryCache()

        await api("/tickets", timed, create_ticket("Printer on fire"))

        first = await api("/tickets/1", timed, cache)
        second = await api("/tickets/1", cache)
        print("served from cache:", first is second)


if __name__ == "__main__":
    asyncio.run(main())
