"""
Demo server for the examples.

Echoes every request back as JSON after a random delay of up to three
seconds. Run with ``uvicorn examples.server:app --port 8080``.
"""

import asyncio
import random

from fastapi import FastAPI, Request

app = FastAPI(title="fetch-pipeline demo server")


@app.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def echo(path: str, request: Request) -> dict:
    await asyncio.sleep(random.random() * 3)
    return {
        "method": request.method,
        "path": "/" + path,
        "query": request.query_params.multi_items(),
        "body": (await request.body()).decode("utf-8", errors="replace"),
    }
