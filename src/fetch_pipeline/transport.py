"""Transport registration and the httpx-backed transport."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable
from typing import TYPE_CHECKING, Any

import httpx

from fetch_pipeline.enums import Redirect
from fetch_pipeline.exceptions import (
    NoTransportConfigured,
    RedirectRejected,
    RequestAborted,
)
from fetch_pipeline.middlewares.body import FormData

if TYPE_CHECKING:
    from fetch_pipeline._types import Transport
    from fetch_pipeline.context import RequestDescriptor
    from fetch_pipeline.middlewares.abortable import AbortSignal

logger = logging.getLogger("fetch_pipeline.transport")

_registered: Transport | None = None


def use_transport(transport: Transport | None) -> None:
    """Register the process-wide fallback transport. Last call wins."""
    global _registered
    _registered = transport
    logger.debug("Registered transport %r", transport)


def registered_transport() -> Transport | None:
    return _registered


def resolve_transport(injected: Transport | None = None) -> Transport:
    """Return the injected transport, else the registered one."""
    transport = injected if injected is not None else _registered
    if transport is None:
        raise NoTransportConfigured()
    return transport


class HttpxTransport:
    """Transport performing requests with an ``httpx.AsyncClient``.

    ``mode``, ``credentials``, ``cache`` and ``referrer`` carry browser
    semantics and are not applied. ``redirect`` maps onto httpx's redirect
    following; with ``Redirect.ERROR`` a 3xx response raises
    ``RedirectRejected``. A request signal aborts the in-flight send.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        timeout: float | httpx.Timeout | None = 30.0,
    ) -> None:
        self._client = client
        self._owns_client = client is None
        self._timeout = timeout

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=self._timeout)
        return self._client

    async def __call__(self, url: str, descriptor: RequestDescriptor) -> httpx.Response:
        if descriptor.signal is not None and descriptor.signal.aborted:
            raise RequestAborted(reason=descriptor.signal.reason)
        request = self.client.build_request(
            descriptor.method.value,
            url,
            headers=dict(descriptor.headers),
            **_body_kwargs(descriptor.body),
        )
        send = self.client.send(
            request, follow_redirects=descriptor.redirect is Redirect.FOLLOW
        )
        if descriptor.signal is None:
            response = await send
        else:
            response = await _race_signal(send, descriptor.signal)

        if descriptor.redirect is Redirect.ERROR and response.is_redirect:
            await response.aclose()
            raise RedirectRejected(response.status_code, response.headers.get("location"))
        return response

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> HttpxTransport:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()


def _body_kwargs(body: Any) -> dict[str, Any]:
    if body is None:
        return {}
    if isinstance(body, FormData):
        # a None filename renders a plain form field, keeping part order intact
        files: list[tuple[str, Any]] = []
        for part in body:
            if part.is_file:
                content = part.value.encode() if isinstance(part.value, str) else part.value
                files.append((part.name, (part.filename or part.name, content)))
            else:
                files.append((part.name, (None, str(part.value))))
        return {"files": files}
    return {"content": body}


async def _race_signal(send: Awaitable[httpx.Response], signal: AbortSignal) -> httpx.Response:
    send_task = asyncio.ensure_future(send)
    abort_task = asyncio.ensure_future(signal.wait())
    try:
        done, _ = await asyncio.wait(
            {send_task, abort_task}, return_when=asyncio.FIRST_COMPLETED
        )
    except asyncio.CancelledError:
        send_task.cancel()
        abort_task.cancel()
        raise
    abort_task.cancel()

    if send_task in done:
        return send_task.result()

    send_task.cancel()
    await asyncio.gather(send_task, return_exceptions=True)
    logger.debug("Request aborted: %r", signal.reason)
    raise RequestAborted(reason=signal.reason)
