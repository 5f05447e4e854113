"""
Basic usage examples.

Demonstrates:
- Binding an Api to a base address
- Endpoint overrides and absolute URLs
- Built-in method, body and query middleware
- Reading the response
"""

import asyncio

import httpx

from fetch_pipeline import (
    DELETE,
    POST,
    HttpxTransport,
    bind,
    file,
    form,
    json,
    query,
)

from server import app


async def main() -> None:
    client = httpx.AsyncClient(transport=httpx.ASGITransport(app=app))
    async with HttpxTransport(client) as transport:
        api = bind("http://demo.local/api", transport=transport)

        # GET the base address itself
        response = await api()
        print(response.status_code, response.json())

        # POST a JSON body with repeated query parameters
        response = await api(
            "/greetings",
            POST,
            json({"hello": "world"}),
            query({"hello": ["Bing", "Dwen", "Dwen"], "world": "2022"}),
        )
        print(response.status_code, response.json())

        # Form-encoded body
        response = await api("/login", POST, form({"user": "ann", "remember": "1"}))
        print(response.json()["body"])

        # Multipart upload, file() switches the method to POST
        response = await api("/upload", file("avatar", b"\x89PNG...", "me.png"))
        print(response.json()["method"])

        # Absolute endpoints ignore the base address
        response = await api("http://demo.local/health", DELETE)
        print(response.json()["path"])


if __name__ == "__main__":
    asyncio.run(main())
