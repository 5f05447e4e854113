"""RequestContext — per-request state container."""

from __future__ import annotations

import logging
import weakref
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, TypeVar, overload

import httpx

from fetch_pipeline.enums import Cache, Credentials, Method, Mode, Redirect, Referrer
from fetch_pipeline.exceptions import (
    AlreadyCommitted,
    InvalidAddress,
    InvalidToken,
    TransportFailure,
)
from fetch_pipeline.transport import resolve_transport

if TYPE_CHECKING:
    from fetch_pipeline._types import Transport
    from fetch_pipeline.middlewares.abortable import AbortSignal

logger = logging.getLogger("fetch_pipeline.context")

_BACKREF_ATTR = "_fetch_pipeline_context"

_E = TypeVar("_E", bound=Enum)


def is_absolute_url(value: str) -> bool:
    """Return True if ``value`` parses as an absolute URL with scheme and host."""
    try:
        return httpx.URL(value).is_absolute_url
    except (httpx.InvalidURL, TypeError):
        return False


def join_url(base_address: str, endpoint: str) -> str:
    """Join ``endpoint`` path segments onto ``base_address``.

    One trailing slash is stripped from the base, the endpoint is split on
    ``/`` and empty segments are dropped.
    """
    base = base_address[:-1] if base_address.endswith("/") else base_address
    segments = [segment for segment in endpoint.split("/") if segment]
    return "/".join([base, *segments])


def resolve_url(base_address: str, endpoint: str | None = None) -> httpx.URL:
    """Resolve the effective absolute URL for a request."""
    if endpoint is None:
        target = base_address
    elif is_absolute_url(endpoint):
        target = endpoint
    else:
        target = join_url(base_address, endpoint)

    if not is_absolute_url(target):
        raise InvalidAddress(target)
    return httpx.URL(target)


@dataclass(frozen=True)
class RequestDescriptor:
    """Immutable snapshot of a context handed to the transport."""

    method: Method
    url: str
    headers: Mapping[str, str]
    body: Any = None
    mode: Mode = Mode.CORS
    credentials: Credentials = Credentials.INCLUDE
    redirect: Redirect = Redirect.FOLLOW
    cache: Cache = Cache.DEFAULT
    referrer: Referrer = Referrer.CLIENT
    signal: AbortSignal | None = None


@dataclass(eq=False)
class RequestContext:
    """Mutable per-request record shaped by middleware and committed once."""

    url: httpx.URL
    method: Method = Method.GET
    headers: Mapping[str, str] = field(default_factory=lambda: MappingProxyType({}))
    mode: Mode = Mode.CORS
    credentials: Credentials = Credentials.INCLUDE
    redirect: Redirect = Redirect.FOLLOW
    cache: Cache = Cache.DEFAULT
    referrer: Referrer = Referrer.CLIENT
    body: Any | None = None
    signal: AbortSignal | None = None
    response: Any | None = None
    state: dict[str, Any] = field(default_factory=dict)
    transport: Transport | None = field(default=None, repr=False)
    _committed: bool = field(default=False, init=False, repr=False)

    @classmethod
    def create(
        cls,
        base_address: str,
        endpoint: str | None = None,
        *,
        transport: Transport | None = None,
    ) -> RequestContext:
        return cls(url=resolve_url(base_address, endpoint), transport=transport)

    @property
    def committed(self) -> bool:
        return self._committed

    @overload
    def header(self, name: str) -> str | None: ...

    @overload
    def header(self, name: str, value: str) -> RequestContext: ...

    def header(self, name: str, value: str | None = None) -> str | None | RequestContext:
        """Read a header, or write one by replacing the whole mapping."""
        if value is None:
            return self.headers.get(name)
        self.headers = MappingProxyType({**self.headers, name: value})
        return self

    def descriptor(self) -> RequestDescriptor:
        """Snapshot the context, validating the address and every policy token."""
        return RequestDescriptor(
            method=_token(Method, "method", self.method),
            url=str(_absolute(self.url)),
            headers=dict(self.headers),
            body=self.body,
            mode=_token(Mode, "mode", self.mode),
            credentials=_token(Credentials, "credentials", self.credentials),
            redirect=_token(Redirect, "redirect", self.redirect),
            cache=_token(Cache, "cache", self.cache),
            referrer=_token(Referrer, "referrer", self.referrer),
            signal=self.signal,
        )

    async def commit(self) -> Any:
        """Perform the single transport call for this context."""
        if self._committed:
            raise AlreadyCommitted()
        descriptor = self.descriptor()
        self._committed = True

        transport = resolve_transport(self.transport)
        logger.debug("Committing %s %s", descriptor.method, descriptor.url)
        try:
            response = await transport(descriptor.url, descriptor)
        except Exception as exc:
            raise TransportFailure(f"Transport call failed: {exc}", cause=exc) from exc

        self.response = response
        _attach_context(response, self)
        return response


def _absolute(url: Any) -> httpx.URL:
    try:
        parsed = httpx.URL(url)
    except (httpx.InvalidURL, TypeError):
        raise InvalidAddress(str(url)) from None
    if not parsed.is_absolute_url:
        raise InvalidAddress(str(parsed))
    return parsed


def _token(enum_cls: type[_E], field_name: str, value: Any) -> _E:
    try:
        return enum_cls(value)
    except ValueError:
        raise InvalidToken(field_name, value) from None


def _attach_context(response: Any, ctx: RequestContext) -> None:
    try:
        setattr(response, _BACKREF_ATTR, weakref.ref(ctx))
    except (AttributeError, TypeError):
        logger.debug("Response %r does not accept a context back-reference", response)


def context_of(response: Any) -> RequestContext | None:
    """Return the context that produced ``response`` while it is still alive."""
    ref = getattr(response, _BACKREF_ATTR, None)
    if ref is None:
        return None
    ctx: RequestContext | None = ref()
    return ctx
