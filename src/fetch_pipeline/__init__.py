"""fetch-pipeline - HTTP requests shaped by a chain of middleware."""

from fetch_pipeline.api import Api, bind, get_api
from fetch_pipeline.chain import Chain, flatten
from fetch_pipeline.context import (
    RequestContext,
    RequestDescriptor,
    context_of,
    join_url,
    resolve_url,
)
from fetch_pipeline.enums import Cache, Credentials, Method, Mode, Redirect, Referrer
from fetch_pipeline.exceptions import (
    AlreadyCommitted,
    FetchError,
    InvalidAddress,
    InvalidToken,
    MiddlewareFault,
    NoTransportConfigured,
    RedirectRejected,
    RequestAborted,
    TransportFailure,
)
from fetch_pipeline.hooks import (
    AfterMiddleware,
    AfterRequest,
    BeforeRequest,
    CallbackHook,
    PipelineHook,
)
from fetch_pipeline.middlewares import (
    CONNECT,
    DELETE,
    GET,
    HEAD,
    OPTIONS,
    PATCH,
    POST,
    PUT,
    TRACE,
    UNDEFINED,
    AbortController,
    AbortSignal,
    FormData,
    FormPart,
    QueryOptions,
    abortable,
    file,
    form,
    json,
    method,
    query,
)
from fetch_pipeline.pipeline import Pipeline, PipelineState
from fetch_pipeline.trace import PipelineTrace, TraceEntry
from fetch_pipeline.transport import HttpxTransport, use_transport

__all__ = [
    "CONNECT",
    "DELETE",
    "GET",
    "HEAD",
    "OPTIONS",
    "PATCH",
    "POST",
    "PUT",
    "TRACE",
    "UNDEFINED",
    "AbortController",
    "AbortSignal",
    "AfterMiddleware",
    "AfterRequest",
    "AlreadyCommitted",
    "Api",
    "BeforeRequest",
    "Cache",
    "CallbackHook",
    "Chain",
    "Credentials",
    "FetchError",
    "FormData",
    "FormPart",
    "HttpxTransport",
    "InvalidAddress",
    "InvalidToken",
    "Method",
    "MiddlewareFault",
    "Mode",
    "NoTransportConfigured",
    "Pipeline",
    "PipelineHook",
    "PipelineState",
    "PipelineTrace",
    "QueryOptions",
    "Redirect",
    "RedirectRejected",
    "Referrer",
    "RequestAborted",
    "RequestContext",
    "RequestDescriptor",
    "TraceEntry",
    "TransportFailure",
    "abortable",
    "bind",
    "context_of",
    "file",
    "flatten",
    "form",
    "get_api",
    "join_url",
    "json",
    "method",
    "query",
    "resolve_url",
    "use_transport",
]
