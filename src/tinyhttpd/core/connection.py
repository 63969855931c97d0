"""
=============================================================================
CONNECTION MANAGEMENT
=============================================================================

Wraps one accepted client socket for the lifetime of a single
request/response exchange.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

    Client sends:                 Server might receive:
        send("GET / HT")              recv() → "GET / HTTP/1.1\r\n\r\n"
        send("TP/1.1\r\n\r\n")        (or in three pieces, or in one)

recv() returns whatever the kernel happens to have. Rather than gluing
chunks together by hand, we ask the socket for a buffered file object:

    reader = sock.makefile("rb")
    reader.readline()     ← blocks until a full line (or EOF)
    reader.read(n)        ← blocks until n bytes (or EOF)

The buffering lives in io.BufferedReader, and the request reader only
ever sees lines and exact byte counts.

=============================================================================
ONE REQUEST PER CONNECTION
=============================================================================

There is no keep-alive. Every connection follows the same path:

    ACCEPTED ──► PARSING ──► DISPATCHING ──► RESPONDING ──► CLOSED
        │           │              │                           ▲
        └───────────┴──────────────┴───────────────────────────┘
                     any fatal failure closes immediately

Closing is unconditional once the response is written (or abandoned).

=============================================================================
"""

import logging
import socket
import time
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import BinaryIO, Optional


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Where a connection is in its single exchange. Used for logging."""

    ACCEPTED = "accepted"        # Just accepted, nothing read yet
    PARSING = "parsing"          # Reading the request off the stream
    DISPATCHING = "dispatching"  # Request parsed, handler is running
    RESPONDING = "responding"    # Writing response bytes
    CLOSED = "closed"            # Socket released


@dataclass
class Connection:
    """
    Represents a client connection.

    Attributes:
        socket: The accepted client socket.
        address: Client's (ip, port) tuple.
        timeout: Read/write timeout in seconds, None for blocking.
        id: Short unique identifier for log lines.
        state: Current ConnectionState.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: tuple[str, int]
    timeout: Optional[float] = None

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.ACCEPTED
    created_at: float = field(default_factory=time.time)

    _reader: Optional[BinaryIO] = field(default=None, repr=False)

    def __post_init__(self):
        # None → fully blocking; a number bounds every recv/send
        self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    @property
    def closed(self) -> bool:
        return self.state == ConnectionState.CLOSED

    @property
    def reader(self) -> BinaryIO:
        """
        Buffered binary stream over the socket, created on first use.

        Reading from it moves the connection into PARSING.
        """
        if self._reader is None:
            self._reader = self.socket.makefile("rb")
        self.state = ConnectionState.PARSING
        return self._reader

    def mark(self, state: ConnectionState) -> None:
        """Record a lifecycle transition."""
        self.state = state

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes to the client.

        Uses sendall() so a large body is never cut short by a partially
        filled send buffer.

        Returns:
            True if the bytes were handed to the kernel, False if the
            client is gone. A failed send is logged, never raised.
        """
        self.state = ConnectionState.RESPONDING

        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self) -> None:
        """
        Close the connection. Safe to call more than once.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    TCP Close Sequence                            │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   1. shutdown(SHUT_WR)   FIN → client ("no more data")          │
        │   2. drain               discard unread request bytes, so the   │
        │                          kernel doesn't answer them with RST    │
        │   3. close()             release reader and file descriptor     │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError as e:
            logger.debug(f"[{self.id}] shutdown: {e}")

        try:
            self.socket.settimeout(0.5)
            while self.socket.recv(1024):
                pass
        except OSError as e:
            # socket.timeout is an OSError too
            logger.debug(f"[{self.id}] drain stopped: {e}")

        # The makefile() object holds its own reference to the descriptor
        if self._reader is not None:
            self._reader.close()
        self.socket.close()

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    # =========================================================================
    # CONTEXT MANAGER
    # =========================================================================

    def __enter__(self) -> "Connection":
        """
        Allows using Connection with 'with' for automatic cleanup:

            with conn:
                request = reader.read_request()
                conn.send_response(response.to_bytes())
            # Connection closed here, even on error
        """
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
