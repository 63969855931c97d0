"""
pytest configuration and fixtures.
"""

import socket
import threading
from pathlib import Path
from typing import Generator, Optional

import pytest

from tinyhttpd import HTTPServer, ServerConfig


@pytest.fixture
def sample_get_request() -> bytes:
    """Sample HTTP GET request."""
    return (
        b"GET /echo/hello HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"User-Agent: curl/8.0\r\n"
        b"Accept: */*\r\n"
        b"\r\n"
    )


@pytest.fixture
def sample_post_request() -> bytes:
    """Sample HTTP POST request uploading a small file."""
    body = b"abc"
    return (
        b"POST /files/new.txt HTTP/1.1\r\n"
        b"Host: localhost:4221\r\n"
        b"Content-Type: application/octet-stream\r\n"
        + f"Content-Length: {len(body)}\r\n\r\n".encode()
        + body
    )


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    """Empty directory to back /files/<name>."""
    root = tmp_path / "files"
    root.mkdir()
    return root


class LiveServer:
    """Test server helper that runs in a background thread."""

    def __init__(self, server: HTTPServer):
        self.server = server
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        return self.server.address[1]

    def start(self):
        self._thread = threading.Thread(target=self.server.run, daemon=True)
        self._thread.start()

        if not self.server.wait_until_ready(timeout=5.0):
            raise RuntimeError("Server failed to start")

    def stop(self):
        self.server.shutdown()
        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

    def connect(self, timeout: float = 5.0) -> socket.socket:
        return socket.create_connection(("127.0.0.1", self.port), timeout=timeout)

    def request(self, raw: bytes, timeout: float = 5.0) -> bytes:
        """Send raw bytes, half-close, and read the reply until EOF."""
        with self.connect(timeout) as sock:
            sock.sendall(raw)
            sock.shutdown(socket.SHUT_WR)
            return self.read_all(sock)

    @staticmethod
    def read_all(sock: socket.socket) -> bytes:
        """Read until the server closes its side."""
        chunks = []
        while True:
            chunk = sock.recv(4096)
            if not chunk:
                return b"".join(chunks)
            chunks.append(chunk)


@pytest.fixture
def live_server(files_root: Path) -> Generator[LiveServer, None, None]:
    """A running server on a free port, serving files from files_root."""
    server = HTTPServer(ServerConfig(
        host="127.0.0.1",
        port=0,  # Let OS pick a free port
        timeout=5.0,
        files_root=str(files_root),
        log_level="INFO",
    ))

    live = LiveServer(server)
    live.start()

    yield live

    live.stop()


@pytest.fixture
def live_server_without_files() -> Generator[LiveServer, None, None]:
    """A running server started without a files directory."""
    live = LiveServer(HTTPServer(ServerConfig(port=0, timeout=5.0)))
    live.start()

    yield live

    live.stop()
