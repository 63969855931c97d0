"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed catalog of status codes this server can answer with.

=============================================================================
WHY SO FEW?
=============================================================================

A general-purpose server needs the whole RFC 7231 table. This one has a
fixed set of routes, and each route can only end in a handful of ways:

    ┌────────┬─────────────────────────┬──────────────────────────────────┐
    │  Code  │  Reason phrase          │  Produced by                     │
    ├────────┼─────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                     │  /, /echo, /user-agent, GET file │
    │  201   │  Created                │  POST /files/<name>              │
    │  400   │  Bad Request            │  malformed request, missing      │
    │        │                         │  User-Agent or POST body         │
    │  404   │  Not Found              │  unknown path, missing file      │
    │  500   │  Internal Server Error  │  write failure, no files root,   │
    │        │                         │  handler crash                   │
    └────────┴─────────────────────────┴──────────────────────────────────┘

The catalog is configuration data: members are immutable (code, phrase)
pairs and nothing adds to it at runtime.

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes and reason phrases.

    Extends IntEnum, so members compare equal to their integer codes:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                      # Request succeeded
    CREATED = 201                 # File written
    BAD_REQUEST = 400             # Malformed or incomplete request
    NOT_FOUND = 404               # No route, or no such file
    INTERNAL_SERVER_ERROR = 500   # Server could not complete the request

    @property
    def code(self) -> int:
        """The numeric status code."""
        return int(self)

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

        The reason phrase is the text after the code in the status line:

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES[self]


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}
