"""Shared pytest fixtures for fetch-pipeline tests."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Iterator
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import RedirectResponse

from fetch_pipeline.transport import HttpxTransport, registered_transport, use_transport

BASE_ADDRESS = "http://api.test/v1"


@pytest.fixture(autouse=True)
def _isolate_registered_transport() -> Iterator[None]:
    """Keep the process-wide transport slot empty for every test."""
    previous = registered_transport()
    use_transport(None)
    yield
    use_transport(previous)


@pytest.fixture
def base_address() -> str:
    return BASE_ADDRESS


@pytest.fixture
def mock_transport() -> AsyncMock:
    """Mock transport answering every request with a simple response object."""

    async def _respond(url: str, descriptor: Any) -> SimpleNamespace:
        return SimpleNamespace(status_code=200, url=url, descriptor=descriptor)

    return AsyncMock(side_effect=_respond)


@pytest.fixture
def echo_app() -> FastAPI:
    """FastAPI app echoing back what it received."""
    app = FastAPI()

    @app.get("/v1/old")
    async def old() -> RedirectResponse:
        return RedirectResponse("/v1/new", status_code=302)

    @app.get("/v1/slow")
    async def slow() -> dict[str, str]:
        await asyncio.sleep(5)
        return {"status": "late"}

    @app.api_route(
        "/{path:path}",
        methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    )
    async def echo(path: str, request: Request) -> dict[str, Any]:
        body = await request.body()
        return {
            "method": request.method,
            "path": "/" + path,
            "query": [list(item) for item in request.query_params.multi_items()],
            "headers": dict(request.headers),
            "body": body.decode("utf-8", errors="replace"),
        }

    return app


@pytest.fixture
async def http_transport(echo_app: FastAPI) -> AsyncIterator[HttpxTransport]:
    """HttpxTransport wired to the echo app in-process."""
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=echo_app))
    async with client:
        yield HttpxTransport(client)
