"""Built-in middleware."""

from fetch_pipeline.middlewares.abortable import (
    AbortController,
    AbortSignal,
    abortable,
)
from fetch_pipeline.middlewares.body import FormData, FormPart, file, form, json
from fetch_pipeline.middlewares.methods import (
    CONNECT,
    DELETE,
    GET,
    HEAD,
    OPTIONS,
    PATCH,
    POST,
    PUT,
    TRACE,
    method,
)
from fetch_pipeline.middlewares.query import UNDEFINED, QueryOptions, query

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
    "FormData",
    "FormPart",
    "QueryOptions",
    "abortable",
    "file",
    "form",
    "json",
    "method",
    "query",
]
