"""
=============================================================================
LOW-LEVEL TCP SOCKET SERVER
=============================================================================

Owns the listening socket: bind, listen, accept, hand off, repeat.

SOCKET LIFECYCLE (Server Side):
────────────────────────────────

    1. socket()    Create a socket file descriptor
    2. bind()      Associate it with IP:PORT (port 0 = "pick one for me")
    3. listen()    OS starts queueing incoming connections
    4. accept()    Take the next queued connection → NEW client socket
    5. close()     Release the listening socket on shutdown

                 listen(127.0.0.1:4221)
                          │
                          │  accept() every ACCEPT_TIMEOUT at most
                          ▼
                 Connection(sock, addr)  ──►  callback(conn)
                          │                      returns at once
                          └──── loop until shutdown() ◄──┘

=============================================================================
STAYING ALIVE
=============================================================================

The accept loop must outlive every individual failure:

    accept() timed out         → normal, loop to re-check shutdown flag
    accept() raised OSError    → log, back off briefly, keep accepting
    handler blew up            → that's the connection's problem, the
                                 callback never raises into this loop

Only shutdown() ends the loop.

=============================================================================
SIGNAL HANDLING
=============================================================================

SIGINT (Ctrl+C) and SIGTERM (docker stop, kill) trigger shutdown().
Python only allows installing signal handlers from the MAIN thread, so
when the server runs in a background thread (tests, embedding) the
handlers are left alone.

=============================================================================
"""

import logging
import signal
import socket
import threading
from typing import Callable, Optional, Tuple

from ..config import ServerConfig
from .connection import Connection


logger = logging.getLogger(__name__)


class SocketServer:
    """
    Low-level TCP socket server.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                      SocketServer Internals                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    start(callback)                                                   │
    │        ├──► _create_socket()   SO_REUSEADDR, TCP_NODELAY, 1s timeout │
    │        ├──► bind() + listen()                                        │
    │        ├──► _setup_signals()   main thread only                      │
    │        ├──► _ready_event.set()                                       │
    │        └──► _accept_loop()     blocks until shutdown()               │
    │                 └──► callback(Connection(...))                       │
    │                                                                      │
    │    shutdown()      flag + event, safe from any thread                │
    │    _cleanup()      restore signals, close listening socket           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

    Usage:
        server = SocketServer(config)
        server.start(handle_connection)  # Blocks until shutdown
    """

    ACCEPT_TIMEOUT = 1.0    # How often the loop re-checks _running
    ACCEPT_BACKOFF = 0.1    # Pause after a failed accept()

    def __init__(self, config: ServerConfig):
        """
        Args:
            config: Server configuration (host, port, backlog, timeout).

        The socket is created lazily in start().
        """
        self.config = config

        self._socket: Optional[socket.socket] = None
        self._running = False
        self._bound_address: Optional[Tuple[str, int]] = None

        self._shutdown_event = threading.Event()
        self._ready_event = threading.Event()

        self._original_handlers: dict = {}

    @property
    def address(self) -> Tuple[str, int]:
        """
        The (host, port) actually bound.

        Before start() this is the configured address. After binding,
        port 0 has been replaced by the port the OS picked.
        """
        if self._bound_address is not None:
            return self._bound_address
        return (self.config.host, self.config.port)

    def _create_socket(self) -> socket.socket:
        """Create the listening socket and set its options."""
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)

        # Restart without waiting out TIME_WAIT on the old socket
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)

        # Responses are written in one sendall(); don't let Nagle hold them
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)

        # accept() returns at least once a second so shutdown is noticed
        sock.settimeout(self.ACCEPT_TIMEOUT)

        return sock

    def _setup_signals(self):
        """Install SIGTERM/SIGINT handlers that call shutdown()."""
        if threading.current_thread() is not threading.main_thread():
            logger.debug("Not on main thread; leaving signal handlers alone")
            return

        def shutdown_handler(signum, frame):
            signal_name = signal.Signals(signum).name
            logger.info(f"Received {signal_name}, initiating shutdown...")
            self.shutdown()

        self._original_handlers[signal.SIGTERM] = signal.signal(signal.SIGTERM, shutdown_handler)
        self._original_handlers[signal.SIGINT] = signal.signal(signal.SIGINT, shutdown_handler)

    def _restore_signals(self):
        for sig, handler in self._original_handlers.items():
            signal.signal(sig, handler)
        self._original_handlers.clear()

    def start(self, connection_handler: Callable[[Connection], None]):
        """
        Bind, listen and accept connections until shutdown() is called.

        Args:
            connection_handler: Receives each accepted Connection. It must
                return promptly (HTTPServer starts a thread and returns).

        Raises:
            OSError: If the address cannot be bound.
        """
        self._socket = self._create_socket()

        try:
            self._socket.bind((self.config.host, self.config.port))
        except OSError as e:
            logger.error(f"Failed to bind to {self.config.host}:{self.config.port}: {e}")
            self._socket.close()
            self._socket = None
            raise

        self._socket.listen(self.config.backlog)
        self._bound_address = self._socket.getsockname()[:2]

        self._running = True
        self._shutdown_event.clear()
        self._setup_signals()

        host, port = self._bound_address
        logger.info(f"Server listening on {host}:{port}")
        self._ready_event.set()

        try:
            self._accept_loop(connection_handler)
        finally:
            self._cleanup()

    def _accept_loop(self, connection_handler: Callable[[Connection], None]):
        """
        Accept connections and hand each one off immediately.

            while running:
                accept()  ── timeout ──► continue
                   │      ── OSError ──► log, back off, continue
                   ▼
                Connection(sock, addr, timeout)
                   ▼
                connection_handler(conn)
        """
        while self._running:
            try:
                client_socket, client_address = self._socket.accept()
            except socket.timeout:
                continue
            except OSError as e:
                if not self._running:
                    break
                logger.error(f"Accept error: {e}")
                # Returns early if shutdown() is called meanwhile
                self._shutdown_event.wait(self.ACCEPT_BACKOFF)
                continue

            conn = Connection(
                socket=client_socket,
                address=client_address[:2],
                timeout=self.config.timeout,
            )
            logger.debug(f"[{conn.id}] Accepted connection from {client_address[0]}:{client_address[1]}")

            connection_handler(conn)

    def shutdown(self):
        """
        Stop accepting connections. Idempotent and thread-safe.

        The loop notices within ACCEPT_TIMEOUT seconds.
        """
        if self._running:
            logger.info("Shutting down socket server...")
        self._running = False
        self._shutdown_event.set()

    def _cleanup(self):
        self._restore_signals()

        if self._socket:
            self._socket.close()
            self._socket = None

        self._ready_event.clear()
        logger.info("Socket server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """
        Block until the socket is listening.

        Returns:
            True once ready, False if the timeout expired first.
        """
        return self._ready_event.wait(timeout)
