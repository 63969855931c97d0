"""
=============================================================================
HTTP PROTOCOL IMPLEMENTATION
=============================================================================

The HTTP/1.1 subset this server speaks: turning bytes from a socket into
an HTTPRequest, routing it, and turning an HTTPResponse back into bytes.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP Request-Response Cycle                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   CLIENT                                         SERVER              │
    │      │   GET /echo/hi HTTP/1.1                      │                │
    │      │  ─────────────────────────────────────────►  │ request.py     │
    │      │                                              │ router.py      │
    │      │               HTTP/1.1 200 OK                │ response.py    │
    │      │               Content-Type: text/plain       │                │
    │      │               Content-Length: 2              │                │
    │      │  ◄─────────────────────────────────────────  │                │
    │      │               hi                             │                │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    request.py       RequestReader, HTTPRequest, RequestParseError
    response.py      HTTPResponse, Content, constructors
    router.py        Router, Route, PreconditionError
    status_codes.py  HTTPStatus

=============================================================================
"""

from .status_codes import HTTPStatus
from .request import (
    HTTPRequest,
    Method,
    ParseErrorKind,
    RequestParseError,
    RequestReader,
    parse_request,
)
from .response import (
    Content,
    HTTPResponse,
    bad_request,
    created,
    empty_response,
    file_response,
    internal_error,
    not_found,
    ok,
    text_response,
)
from .router import PreconditionError, Route, RouteMatch, Router

__all__ = [
    "HTTPStatus",
    "HTTPRequest",
    "Method",
    "ParseErrorKind",
    "RequestParseError",
    "RequestReader",
    "parse_request",
    "Content",
    "HTTPResponse",
    "bad_request",
    "created",
    "empty_response",
    "file_response",
    "internal_error",
    "not_found",
    "ok",
    "text_response",
    "PreconditionError",
    "Route",
    "RouteMatch",
    "Router",
]
