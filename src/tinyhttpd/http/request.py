"""
=============================================================================
HTTP REQUEST READER
=============================================================================

Reads one HTTP/1.1 request off a blocking byte stream and turns it into a
structured HTTPRequest.

=============================================================================
HTTP REQUEST ANATOMY
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     HTTP REQUEST STRUCTURE                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │  ┌─ START LINE ───────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    POST /files/notes.txt HTTP/1.1\r\n                          │ │
    │  │    ──┬─ ────────┬──────── ───┬────                             │ │
    │  │      │          │            │                                  │ │
    │  │   Method       Path        Version                              │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ HEADERS ──────────────────────────────────────────────────────┐ │
    │  │                                                                 │ │
    │  │    Host: localhost:4221\r\n                                    │ │
    │  │    User-Agent: curl/8.0\r\n                                    │ │
    │  │    Content-Length: 3\r\n        ← the only body framing       │ │
    │  │                                                                 │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ EMPTY LINE ───────────────────────────────────────────────────┐ │
    │  │    \r\n                                                         │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    │  ┌─ BODY (only if Content-Length was sent) ───────────────────────┐ │
    │  │    abc                                                          │ │
    │  └─────────────────────────────────────────────────────────────────┘ │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
LINE-ORIENTED PARSING
=============================================================================

The supported subset of HTTP has no folded headers, no chunked bodies and
no pipelining. That makes a simple line reader enough:

    1. readline()             → start line
    2. readline() until blank → headers
    3. read(Content-Length)   → body

We read straight from the socket's buffered file object instead of
collecting the whole message first. The stream itself tells us where
each piece ends, and bytes after the declared body are never touched.

=============================================================================
FIDELITY NOTES
=============================================================================

- Header names are kept EXACTLY as received. "user-agent" and
  "User-Agent" are different keys. RFC 7230 says header names are
  case-insensitive, but clients of this server send canonical casing and
  we match what they send.
- The path is not URL-decoded. "/echo/a%20b" echoes "a%20b".
- A repeated header overwrites the earlier one (last write wins).

=============================================================================
INTERVIEW QUESTIONS ABOUT HTTP PARSING
=============================================================================

Q: "How do you know where the body ends?"
A: "Content-Length. It is the only framing signal we accept. Without it,
   there is no body, even if the client keeps sending bytes."

Q: "What happens if the client lies about Content-Length?"
A: "If it sends fewer bytes and closes, read() comes back short and we
   fail with a body read error. If it sends more, the extra bytes are
   simply never read."

=============================================================================
"""

import io
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Dict, Optional


class Method(Enum):
    """The request methods this server understands. Matched exactly."""

    GET = "GET"
    POST = "POST"


class ParseErrorKind(Enum):
    """
    Why a request could not be parsed.

    Each kind maps to one step of the reading algorithm:

        UNREADABLE_START_LINE     step 1 - nothing to read / read failed
        MALFORMED_START_LINE      step 2 - not "METHOD PATH VERSION"
        UNSUPPORTED_METHOD        step 3 - not GET or POST
        MALFORMED_HEADER          step 4 - no ": " delimiter
        MALFORMED_CONTENT_LENGTH  step 5 - not a non-negative integer
        BODY_READ_FAILURE         step 5 - short read or I/O error
    """

    UNREADABLE_START_LINE = "unreadable start line"
    MALFORMED_START_LINE = "malformed start line"
    UNSUPPORTED_METHOD = "unsupported method"
    MALFORMED_HEADER = "malformed header line"
    MALFORMED_CONTENT_LENGTH = "malformed Content-Length"
    BODY_READ_FAILURE = "body read failure"


class RequestParseError(Exception):
    """
    Raised when a request cannot be read or parsed.

    Carries a ParseErrorKind tag so callers can branch on the reason
    without matching message text. `io_error` is True when the failure
    came from the stream itself (EOF, reset, timeout) rather than from
    the bytes we did receive. There is nobody to answer in that case.
    """

    def __init__(self, kind: ParseErrorKind, detail: str = "", io_error: bool = False):
        message = f"{kind.value}: {detail}" if detail else kind.value
        super().__init__(message)
        self.kind = kind
        self.detail = detail
        self.io_error = io_error


@dataclass(frozen=True)
class HTTPRequest:
    """
    A parsed HTTP request.

    Built once per connection and read-only afterwards.

    Attributes:
        method:         Method.GET or Method.POST
        path:           Raw request target, e.g. "/echo/abc" (not decoded)
        version:        Version token from the start line, e.g. "HTTP/1.1"
        headers:        Header name → value, names as received
        body:           Body bytes if Content-Length was sent, else None
        client_address: (ip, port) of the peer, for logging
    """

    method: Method
    path: str
    version: str = "HTTP/1.1"
    headers: Dict[str, str] = field(default_factory=dict)
    body: Optional[bytes] = None
    client_address: tuple[str, int] = ("", 0)

    @property
    def user_agent(self) -> Optional[str]:
        """The User-Agent header value, or None if the client sent none."""
        return self.headers.get("User-Agent")

    @property
    def content_length(self) -> Optional[int]:
        """Length of the body that was read, or None if there is no body."""
        return None if self.body is None else len(self.body)

    def get_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a header value by its exact name.

        Example:
            request.get_header("User-Agent")   # "curl/8.0"
            request.get_header("user-agent")   # None - names are exact
        """
        return self.headers.get(name, default)


class RequestReader:
    """
    Reads a single HTTPRequest from a blocking binary stream.

    ==========================================================================
    READER ARCHITECTURE
    ==========================================================================

        socket.makefile("rb") / io.BytesIO
              │
              ▼
        ┌───────────────────────────────────────────────────────────────────┐
        │  REQUEST READER                                                   │
        ├───────────────────────────────────────────────────────────────────┤
        │                                                                    │
        │  1. Read start line ─────────────────────────────────────────────►│
        │     │  EOF / OSError? → UNREADABLE_START_LINE                     │
        │     ▼                                                             │
        │  2. Split on " " into method, path, version ─────────────────────►│
        │     │  < 3 tokens? → MALFORMED_START_LINE                         │
        │     ▼                                                             │
        │  3. Method lookup ──────────────────────────────────────────────►│
        │     │  not GET/POST? → UNSUPPORTED_METHOD                         │
        │     ▼                                                             │
        │  4. Header lines until blank ───────────────────────────────────►│
        │     │  no ": "? → MALFORMED_HEADER                                │
        │     ▼                                                             │
        │  5. Content-Length body ────────────────────────────────────────►│
        │     │  bad number? → MALFORMED_CONTENT_LENGTH                     │
        │     │  short read? → BODY_READ_FAILURE                            │
        │     ▼                                                             │
        │  6. Build HTTPRequest                                             │
        │                                                                    │
        └───────────────────────────────────────────────────────────────────┘

    ==========================================================================
    LIMITS
    ==========================================================================

    readline() on an unbounded stream will happily buffer forever if the
    client never sends a newline. max_line_size caps every line, and
    max_body_size caps the Content-Length we are willing to honour.

    ==========================================================================
    """

    HEADER_DELIMITER = ": "
    CONTENT_LENGTH = "Content-Length"

    # Digits only: no sign, no whitespace, no "0x".
    CONTENT_LENGTH_PATTERN = re.compile(r"[0-9]+")

    def __init__(
        self,
        stream: BinaryIO,
        max_line_size: int = 8192,
        max_body_size: int = 10 * 1024 * 1024,
    ):
        """
        Args:
            stream: Readable binary stream positioned at a request.
            max_line_size: Longest start/header line accepted, in bytes.
            max_body_size: Largest Content-Length accepted, in bytes.
        """
        self._stream = stream
        self.max_line_size = max_line_size
        self.max_body_size = max_body_size

    def read_request(self, client_address: tuple[str, int] = ("", 0)) -> HTTPRequest:
        """
        Read and parse exactly one request from the stream.

        Args:
            client_address: Peer (ip, port), stored on the request.

        Returns:
            The parsed HTTPRequest.

        Raises:
            RequestParseError: If the request is missing or malformed.
        """
        method, path, version = self._read_start_line()
        headers = self._read_headers()
        body = self._read_body(headers)

        return HTTPRequest(
            method=method,
            path=path,
            version=version,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    # =========================================================================
    # STEP 1-3: START LINE
    # =========================================================================

    def _read_start_line(self) -> tuple[Method, str, str]:
        kind = ParseErrorKind.MALFORMED_START_LINE

        try:
            raw = self._readline(kind)
        except OSError as e:
            raise RequestParseError(
                ParseErrorKind.UNREADABLE_START_LINE, str(e), io_error=True
            ) from e

        if raw is None:
            # Client connected and closed without sending anything
            raise RequestParseError(
                ParseErrorKind.UNREADABLE_START_LINE,
                "connection closed before start line",
                io_error=True,
            )

        line = self._decode(raw, kind)

        # "GET /echo/abc HTTP/1.1" → ["GET", "/echo/abc", "HTTP/1.1"]
        # Single spaces only; "GET  /" yields an empty path token.
        tokens = line.split(" ")
        if len(tokens) < 3:
            raise RequestParseError(kind, repr(line))

        method_token, path, version = tokens[0], tokens[1], tokens[2]

        try:
            method = Method(method_token)
        except ValueError:
            raise RequestParseError(
                ParseErrorKind.UNSUPPORTED_METHOD, repr(method_token)
            ) from None

        return method, path, version

    # =========================================================================
    # STEP 4: HEADERS
    # =========================================================================

    def _read_headers(self) -> Dict[str, str]:
        kind = ParseErrorKind.MALFORMED_HEADER
        headers: Dict[str, str] = {}

        while True:
            try:
                raw = self._readline(kind)
            except OSError as e:
                raise RequestParseError(kind, str(e), io_error=True) from e

            # Blank line ends the header block. So does EOF (raw is None).
            if not raw:
                break

            line = self._decode(raw, kind)

            # Split on the FIRST ": " only - values may contain ": " too,
            # e.g. "Referer: http://host:4221/"
            name, sep, value = line.partition(self.HEADER_DELIMITER)
            if not sep:
                raise RequestParseError(kind, repr(line))

            headers[name] = value  # last write wins

        return headers

    # =========================================================================
    # STEP 5: BODY
    # =========================================================================

    def _read_body(self, headers: Dict[str, str]) -> Optional[bytes]:
        value = headers.get(self.CONTENT_LENGTH)
        if value is None:
            # No framing → no body. Any pending bytes are left unread.
            return None

        if not self.CONTENT_LENGTH_PATTERN.fullmatch(value):
            raise RequestParseError(ParseErrorKind.MALFORMED_CONTENT_LENGTH, repr(value))

        length = int(value)
        if length > self.max_body_size:
            raise RequestParseError(
                ParseErrorKind.MALFORMED_CONTENT_LENGTH,
                f"{length} exceeds limit of {self.max_body_size} bytes",
            )

        try:
            body = self._stream.read(length)
        except OSError as e:
            raise RequestParseError(
                ParseErrorKind.BODY_READ_FAILURE, str(e), io_error=True
            ) from e

        if len(body) < length:
            raise RequestParseError(
                ParseErrorKind.BODY_READ_FAILURE,
                f"expected {length} bytes, got {len(body)}",
                io_error=True,
            )

        return body

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _readline(self, kind: ParseErrorKind) -> Optional[bytes]:
        """
        Read one line and strip its terminator.

        Returns b"" for a blank line and None at EOF. CRLF is the
        terminator; a bare LF is tolerated for hand-typed requests.
        """
        raw = self._stream.readline(self.max_line_size)
        if not raw:
            return None

        if len(raw) >= self.max_line_size and not raw.endswith(b"\n"):
            raise RequestParseError(kind, f"line exceeds {self.max_line_size} bytes")

        if raw.endswith(b"\r\n"):
            return raw[:-2]
        if raw.endswith(b"\n"):
            return raw[:-1]
        return raw

    @staticmethod
    def _decode(raw: bytes, kind: ParseErrorKind) -> str:
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RequestParseError(kind, f"invalid UTF-8: {e}") from e


# =============================================================================
# CONVENIENCE FUNCTION
# =============================================================================

def parse_request(
    data: bytes,
    client_address: tuple[str, int] = ("", 0),
    max_line_size: int = 8192,
    max_body_size: int = 10 * 1024 * 1024,
) -> HTTPRequest:
    """
    Parse a complete request held in memory.

    Wraps the bytes in io.BytesIO and runs a RequestReader over them.
    Handy in tests and tools; the server reads from the socket directly.

    Args:
        data: Raw HTTP request bytes.
        client_address: Client's (ip, port) tuple.
        max_line_size: Longest line accepted.
        max_body_size: Largest Content-Length accepted.

    Returns:
        Parsed HTTPRequest object.
    """
    reader = RequestReader(
        io.BytesIO(data),
        max_line_size=max_line_size,
        max_body_size=max_body_size,
    )
    return reader.read_request(client_address)
