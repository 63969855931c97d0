"""
Unit tests for HTTP request reading and parsing.
"""

import io
import socket

import pytest

from tinyhttpd.http.request import (
    HTTPRequest,
    Method,
    ParseErrorKind,
    RequestParseError,
    RequestReader,
    parse_request,
)


class FailingStream(io.RawIOBase):
    """A stream whose reads raise, like a reset socket."""

    def readable(self):
        return True

    def readinto(self, buffer):
        raise ConnectionResetError("connection reset by peer")


class TestRequestReader:
    """Tests for RequestReader and parse_request."""

    def test_parse_simple_get(self, sample_get_request: bytes):
        """Test parsing a simple GET request."""
        request = parse_request(sample_get_request, ("127.0.0.1", 12345))

        assert request.method is Method.GET
        assert request.path == "/echo/hello"
        assert request.version == "HTTP/1.1"
        assert request.client_address == ("127.0.0.1", 12345)
        assert request.body is None

    def test_start_line_only(self):
        """A bare start line and blank line give empty headers."""
        request = parse_request(b"GET / HTTP/1.1\r\n\r\n")

        assert request.method is Method.GET
        assert request.path == "/"
        assert request.version == "HTTP/1.1"
        assert request.headers == {}

    def test_parse_headers(self, sample_get_request: bytes):
        """Test that headers are parsed with names as received."""
        request = parse_request(sample_get_request)

        assert request.headers == {
            "Host": "localhost:4221",
            "User-Agent": "curl/8.0",
            "Accept": "*/*",
        }
        assert request.user_agent == "curl/8.0"

    def test_header_names_are_case_sensitive(self):
        """A lowercase user-agent header is not the User-Agent header."""
        request = parse_request(b"GET / HTTP/1.1\r\nuser-agent: x\r\n\r\n")

        assert request.user_agent is None
        assert request.get_header("user-agent") == "x"
        assert request.get_header("User-Agent", "default") == "default"

    def test_duplicate_header_last_wins(self):
        """A repeated header keeps the last value."""
        raw = b"GET / HTTP/1.1\r\nX-Test: one\r\nX-Test: two\r\n\r\n"

        assert parse_request(raw).headers == {"X-Test": "two"}

    def test_header_value_may_contain_delimiter(self):
        """Only the first ': ' splits name from value."""
        raw = b"GET / HTTP/1.1\r\nReferer: http://a: b/\r\n\r\n"

        assert parse_request(raw).headers["Referer"] == "http://a: b/"

    def test_empty_header_value(self):
        """'Name: ' with nothing after is an empty value, not an error."""
        request = parse_request(b"GET / HTTP/1.1\r\nX-Empty: \r\n\r\n")

        assert request.headers == {"X-Empty": ""}

    def test_parse_post_with_body(self, sample_post_request: bytes):
        """Test parsing POST request with a Content-Length body."""
        request = parse_request(sample_post_request)

        assert request.method is Method.POST
        assert request.path == "/files/new.txt"
        assert request.body == b"abc"
        assert request.content_length == 3
        assert request.get_header("Content-Length") == "3"

    def test_content_length_zero_gives_empty_body(self):
        """Content-Length: 0 is a present-but-empty body."""
        request = parse_request(b"POST /files/a HTTP/1.1\r\nContent-Length: 0\r\n\r\n")

        assert request.body == b""

    def test_no_content_length_ignores_pending_bytes(self):
        """Without Content-Length nothing after the headers is read."""
        stream = io.BytesIO(b"POST /files/a HTTP/1.1\r\n\r\nleftover")
        request = RequestReader(stream).read_request()

        assert request.body is None
        assert stream.read() == b"leftover"

    def test_reads_exactly_content_length(self):
        """Bytes past the declared length are left on the stream."""
        stream = io.BytesIO(b"POST /x HTTP/1.1\r\nContent-Length: 3\r\n\r\nabcdef")
        request = RequestReader(stream).read_request()

        assert request.body == b"abc"
        assert stream.read() == b"def"

    def test_path_is_not_decoded(self):
        """Percent-escapes stay as sent."""
        request = parse_request(b"GET /echo/a%20b HTTP/1.1\r\n\r\n")

        assert request.path == "/echo/a%20b"

    def test_extra_start_line_tokens_ignored(self):
        """Tokens after the version are ignored."""
        request = parse_request(b"GET /echo/x HTTP/1.1 extra\r\n\r\n")

        assert request.path == "/echo/x"
        assert request.version == "HTTP/1.1"

    def test_bare_lf_line_endings(self):
        """Hand-typed requests with LF only still parse."""
        request = parse_request(b"GET /user-agent HTTP/1.1\nUser-Agent: nc\n\n")

        assert request.user_agent == "nc"

    def test_eof_ends_header_block(self):
        """A stream ending without the blank line still yields a request."""
        request = parse_request(b"GET / HTTP/1.1\r\nHost: x\r\n")

        assert request.headers == {"Host": "x"}

    def test_version_is_kept_verbatim(self):
        """The version token is not validated."""
        request = parse_request(b"GET / HTTP/1.0\r\n\r\n")

        assert request.version == "HTTP/1.0"

    def test_reads_from_socket_stream(self):
        """The reader works over socket.makefile like the server uses."""
        left, right = socket.socketpair()
        try:
            left.sendall(b"GET /echo/sock HTTP/1.1\r\nUser-Agent: t\r\n\r\n")
            with right.makefile("rb") as stream:
                request = RequestReader(stream).read_request()
        finally:
            left.close()
            right.close()

        assert request.path == "/echo/sock"
        assert request.user_agent == "t"


class TestRequestParseErrors:
    """Each failure maps to exactly one ParseErrorKind."""

    @pytest.mark.parametrize(
        "raw, kind",
        [
            (b"GET\r\n\r\n", ParseErrorKind.MALFORMED_START_LINE),
            (b"GET /\r\n\r\n", ParseErrorKind.MALFORMED_START_LINE),
            (b"\r\n\r\n", ParseErrorKind.MALFORMED_START_LINE),
            (b"\xff\xfe / HTTP/1.1\r\n\r\n", ParseErrorKind.MALFORMED_START_LINE),
            (b"PUT / HTTP/1.1\r\n\r\n", ParseErrorKind.UNSUPPORTED_METHOD),
            (b"get / HTTP/1.1\r\n\r\n", ParseErrorKind.UNSUPPORTED_METHOD),
            (b"GET / HTTP/1.1\r\nNoDelimiter\r\n\r\n", ParseErrorKind.MALFORMED_HEADER),
            (b"GET / HTTP/1.1\r\nName:value\r\n\r\n", ParseErrorKind.MALFORMED_HEADER),
            (b"POST / HTTP/1.1\r\nContent-Length: abc\r\n\r\n", ParseErrorKind.MALFORMED_CONTENT_LENGTH),
            (b"POST / HTTP/1.1\r\nContent-Length: -1\r\n\r\n", ParseErrorKind.MALFORMED_CONTENT_LENGTH),
            (b"POST / HTTP/1.1\r\nContent-Length:  3\r\n\r\nabc", ParseErrorKind.MALFORMED_CONTENT_LENGTH),
        ],
    )
    def test_malformed_requests(self, raw: bytes, kind: ParseErrorKind):
        """Malformed input raises with the matching kind and no I/O flag."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.kind is kind
        assert exc_info.value.io_error is False

    @pytest.mark.parametrize("raw", [b"\r\n", b"\n", b"\r\nGET / HTTP/1.1\r\n\r\n"])
    def test_blank_start_line_is_malformed(self, raw: bytes):
        """A blank first line is a bad request, not a closed connection."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request(raw)

        assert exc_info.value.kind is ParseErrorKind.MALFORMED_START_LINE
        assert exc_info.value.io_error is False

    def test_empty_stream(self):
        """A client that closes without sending anything."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request(b"")

        assert exc_info.value.kind is ParseErrorKind.UNREADABLE_START_LINE
        assert exc_info.value.io_error is True

    def test_read_failure_on_start_line(self):
        """An OSError while reading the start line."""
        reader = RequestReader(io.BufferedReader(FailingStream()))

        with pytest.raises(RequestParseError) as exc_info:
            reader.read_request()

        assert exc_info.value.kind is ParseErrorKind.UNREADABLE_START_LINE
        assert exc_info.value.io_error is True

    def test_short_body(self):
        """Fewer body bytes than Content-Length promised."""
        with pytest.raises(RequestParseError) as exc_info:
            parse_request(b"POST /files/a HTTP/1.1\r\nContent-Length: 10\r\n\r\nabc")

        assert exc_info.value.kind is ParseErrorKind.BODY_READ_FAILURE
        assert exc_info.value.io_error is True
        assert "expected 10 bytes, got 3" in str(exc_info.value)

    def test_line_too_long(self):
        """Lines over max_line_size are rejected."""
        raw = b"GET /" + b"a" * 200 + b" HTTP/1.1\r\n\r\n"

        with pytest.raises(RequestParseError) as exc_info:
            parse_request(raw, max_line_size=64)

        assert exc_info.value.kind is ParseErrorKind.MALFORMED_START_LINE

    def test_header_too_long(self):
        raw = b"GET / HTTP/1.1\r\nX-Big: " + b"a" * 200 + b"\r\n\r\n"

        with pytest.raises(RequestParseError) as exc_info:
            parse_request(raw, max_line_size=64)

        assert exc_info.value.kind is ParseErrorKind.MALFORMED_HEADER

    def test_body_over_limit(self):
        """A Content-Length above max_body_size is refused before reading."""
        raw = b"POST /files/a HTTP/1.1\r\nContent-Length: 100\r\n\r\n" + b"x" * 100

        with pytest.raises(RequestParseError) as exc_info:
            parse_request(raw, max_body_size=10)

        assert exc_info.value.kind is ParseErrorKind.MALFORMED_CONTENT_LENGTH


class TestHTTPRequest:
    """Tests for the HTTPRequest value itself."""

    def test_is_immutable(self):
        """Requests cannot be modified after parsing."""
        request = HTTPRequest(method=Method.GET, path="/")

        with pytest.raises(AttributeError):
            request.path = "/other"

    def test_content_length_without_body(self):
        assert HTTPRequest(method=Method.GET, path="/").content_length is None
