"""Closed string enumerations whose values are the literal wire tokens."""

from __future__ import annotations

from enum import Enum


class Method(str, Enum):
    """HTTP request methods."""

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    HEAD = "HEAD"
    CONNECT = "CONNECT"
    OPTIONS = "OPTIONS"
    TRACE = "TRACE"
    PATCH = "PATCH"

    def __str__(self) -> str:
        return self.value


class Mode(str, Enum):
    """Request modes."""

    CORS = "cors"
    NO_CORS = "no-cors"
    SAME_ORIGIN = "same-origin"
    NAVIGATE = "navigate"


class Credentials(str, Enum):
    """Credentials policies."""

    OMIT = "omit"
    INCLUDE = "include"
    SAME_ORIGIN = "same-origin"


class Redirect(str, Enum):
    """Redirect policies."""

    FOLLOW = "follow"
    ERROR = "error"
    MANUAL = "manual"


class Cache(str, Enum):
    """Cache policies."""

    DEFAULT = "default"
    NO_STORE = "no-store"
    RELOAD = "reload"
    NO_CACHE = "no-cache"
    FORCE_CACHE = "force-cache"
    ONLY_IF_CACHED = "only-if-cached"


class Referrer(str, Enum):
    """Referrer policies."""

    NO_REFERRER = ""
    CLIENT = "about:client"
