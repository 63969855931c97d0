"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

Immutable response values and their exact wire serialization.

=============================================================================
HTTP RESPONSE ANATOMY
=============================================================================

A response either carries content or it doesn't. Those two shapes
serialize differently:

    ┌─────────────────────────────────────────────────────────────────────┐
    │  WITH CONTENT                                                       │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 200 OK\r\n                   ← status line              │
    │    Content-Type: text/plain\r\n          ← from Content.mime_type   │
    │    Content-Length: 5\r\n                 ← len(Content.body)        │
    │    \r\n                                  ← end of headers           │
    │    hello                                 ← body, verbatim           │
    │                                                                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │  WITHOUT CONTENT                                                    │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    HTTP/1.1 404 Not Found\r\n            ← status line              │
    │    \r\n\r\n                              ← two empty lines, no body │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

No Date, no Server, no Connection header. Clients of this server compare
the bytes exactly, so nothing is added behind the caller's back.

Content-Length is always the BYTE length of the body. For text that
means the length after UTF-8 encoding:

    "héllo"  → 5 characters, 6 bytes → Content-Length: 6

=============================================================================
"""

from dataclasses import dataclass
from typing import Optional

from .status_codes import HTTPStatus


TEXT_PLAIN = "text/plain"
OCTET_STREAM = "application/octet-stream"


@dataclass(frozen=True)
class Content:
    """A response body together with its media type."""

    mime_type: str
    body: bytes

    @property
    def length(self) -> int:
        return len(self.body)


@dataclass(frozen=True)
class HTTPResponse:
    """
    Represents an HTTP response to be sent to the client.

    =========================================================================
    RESPONSE LIFECYCLE
    =========================================================================

        Handler returns          to_bytes()              Connection sends
        HTTPResponse    ─────►   serializes    ─────►    raw bytes
            │                       │                        │
        HTTPResponse(            b"HTTP/1.1 200 OK\r\n   socket.sendall(
          status=OK,               Content-Type: ...\r\n     data
          content=Content(...)     \r\n                    )
        )                          hello"

    =========================================================================
    """

    status: HTTPStatus = HTTPStatus.OK
    content: Optional[Content] = None

    VERSION = "HTTP/1.1"

    @property
    def status_line(self) -> str:
        """
        Get the HTTP status line, e.g. "HTTP/1.1 200 OK".

        Format: HTTP-VERSION SP STATUS-CODE SP REASON-PHRASE
        """
        return f"{self.VERSION} {self.status.code} {self.status.phrase}"

    @property
    def body(self) -> bytes:
        """The body bytes, or b"" for a response without content."""
        return self.content.body if self.content is not None else b""

    def to_bytes(self) -> bytes:
        """
        Serialize the response to bytes for sending over the socket.

        Returns:
            Complete HTTP response as bytes ready for socket.sendall()
        """
        status_line = f"{self.status_line}\r\n".encode("ascii")

        if self.content is None:
            return status_line + b"\r\n\r\n"

        headers = (
            f"Content-Type: {self.content.mime_type}\r\n"
            f"Content-Length: {self.content.length}\r\n"
            "\r\n"
        ).encode("ascii")

        return status_line + headers + self.content.body


# =============================================================================
# CONSTRUCTORS
# =============================================================================

def empty_response(status: HTTPStatus) -> HTTPResponse:
    """A response with a status line and nothing else."""
    return HTTPResponse(status=status)


def text_response(text: str, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """
    Create a text/plain response.

    The text is encoded as UTF-8; Content-Length counts the encoded bytes.
    """
    return HTTPResponse(status=status, content=Content(TEXT_PLAIN, text.encode("utf-8")))


def file_response(data: bytes, status: HTTPStatus = HTTPStatus.OK) -> HTTPResponse:
    """Create an application/octet-stream response carrying raw file bytes."""
    return HTTPResponse(status=status, content=Content(OCTET_STREAM, data))


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
# Every status in the catalog has a shorthand. None of them carry content:
# error details go to the log, not to the client.

def ok() -> HTTPResponse:
    """200 OK with no content."""
    return empty_response(HTTPStatus.OK)


def created() -> HTTPResponse:
    """201 Created. Returned after a file has been written."""
    return empty_response(HTTPStatus.CREATED)


def bad_request() -> HTTPResponse:
    """
    Create a 400 Bad Request response.

    Used when the client sent a malformed request, or one missing
    something the route needs (a User-Agent header, a POST body).
    """
    return empty_response(HTTPStatus.BAD_REQUEST)


def not_found() -> HTTPResponse:
    """404 Not Found. Unknown path, missing file, or a name outside the root."""
    return empty_response(HTTPStatus.NOT_FOUND)


def internal_error() -> HTTPResponse:
    """
    Create a 500 Internal Server Error response.

    Used when the server could not finish a request it understood:
    a failed write, a missing files directory, or a handler crash.
    """
    return empty_response(HTTPStatus.INTERNAL_SERVER_ERROR)
