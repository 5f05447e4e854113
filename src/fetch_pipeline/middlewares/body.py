"""Body middleware — json(), form(), file() and the FormData container."""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import httpx
import orjson

from fetch_pipeline.chain import Chain
from fetch_pipeline.middlewares.methods import POST

if TYPE_CHECKING:
    from fetch_pipeline._types import Middleware, Next
    from fetch_pipeline.context import RequestContext


@dataclass(frozen=True)
class FormPart:
    """Single multipart entry."""

    name: str
    value: Any
    filename: str | None = None
    is_file: bool = True


class FormData:
    """Ordered multipart payload; repeated names are kept."""

    def __init__(self) -> None:
        self._parts: list[FormPart] = []

    def append(self, name: str, value: Any, filename: str | None = None) -> FormData:
        self._parts.append(FormPart(name, value, filename))
        return self

    def field(self, name: str, value: str) -> FormData:
        self._parts.append(FormPart(name, value, is_file=False))
        return self

    def get_all(self, name: str) -> list[FormPart]:
        return [part for part in self._parts if part.name == name]

    def __iter__(self) -> Iterator[FormPart]:
        return iter(self._parts)

    def __len__(self) -> int:
        return len(self._parts)

    def __repr__(self) -> str:
        return f"FormData({[part.name for part in self._parts]!r})"


def json(obj: Any) -> Middleware:
    """Serialize ``obj`` as the JSON request body."""

    async def json_body(ctx: RequestContext, next: Next) -> Any:
        ctx.header("Content-Type", "application/json")
        ctx.body = orjson.dumps(obj, option=orjson.OPT_NON_STR_KEYS)
        return await next()

    return json_body


def form(obj: Mapping[str, Any]) -> Middleware:
    """URL-encode ``obj`` as the request body; sequence values repeat the key."""

    async def form_body(ctx: RequestContext, next: Next) -> Any:
        ctx.header("Content-Type", "application/x-www-form-urlencoded")
        ctx.body = str(httpx.QueryParams(obj))
        return await next()

    return form_body


def file(name: str, data: Any, filename: str | None = None) -> Chain:
    """Attach a file part to a multipart body, forcing the method to POST."""

    async def attach_file(ctx: RequestContext, next: Next) -> Any:
        if ctx.body is None:
            ctx.body = FormData()
        elif not isinstance(ctx.body, FormData):
            raise TypeError(
                f"file() needs an empty or multipart body, got {type(ctx.body).__name__}"
            )
        ctx.body.append(name, data, filename)
        return await next()

    return Chain(POST, attach_file)
