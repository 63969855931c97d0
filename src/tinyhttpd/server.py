"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the pieces together: socket server, request reader, router, access
log.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     ONE CONNECTION, ONE THREAD                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   accept loop (main thread)                                         │
    │        │                                                             │
    │        └──► _handle_connection(conn)                                │
    │                 └──► Thread(_process_connection).start()  ← returns │
    │                                                                      │
    │   connection thread                                                 │
    │        │                                                             │
    │        ├──► RequestReader(conn.reader).read_request()               │
    │        │       ├── I/O failure       → log warning, close           │
    │        │       └── malformed request → 400, close                   │
    │        │                                                             │
    │        ├──► router.dispatch(request)                                │
    │        │       └── unexpected exception → log traceback, 500        │
    │        │                                                             │
    │        ├──► conn.send_response(response.to_bytes())                 │
    │        ├──► access log line                                         │
    │        └──► conn.close()                                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Nothing is shared between connection threads except the frozen config,
the router and the file store, none of which change after startup.

=============================================================================
"""

import logging
import threading
from typing import Optional, Tuple

from .access_log import log_request
from .config import ServerConfig
from .core.connection import Connection, ConnectionState
from .core.socket_server import SocketServer
from .handlers.files import FileStore
from .handlers.routes import build_router
from .http.request import RequestParseError, RequestReader
from .http.response import bad_request, internal_error
from .http.router import Router


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    The HTTP server.

    Usage:
        server = HTTPServer(ServerConfig(files_root="/tmp/data"))
        server.run()    # blocks until Ctrl+C / SIGTERM / shutdown()

    In tests, run it on a background thread with port=0:

        server = HTTPServer(ServerConfig(port=0))
        threading.Thread(target=server.run, daemon=True).start()
        server.wait_until_ready(5)
        host, port = server.address
    """

    def __init__(self, config: Optional[ServerConfig] = None, router: Optional[Router] = None):
        """
        Args:
            config: Server configuration. Defaults to ServerConfig().
            router: Route table. Defaults to build_router() over the
                configured files root.

        Raises:
            ValueError: If the configuration is invalid.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._socket_server = SocketServer(self.config)

        if router is None:
            store = FileStore(self.config.files_root) if self.config.files_root else None
            router = build_router(store)
        self._router = router

    @property
    def router(self) -> Router:
        return self._router

    @property
    def address(self) -> Tuple[str, int]:
        """Bound (host, port); the real port once listening."""
        return self._socket_server.address

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    def run(self):
        """
        Start the server (blocking).

        Raises:
            OSError: If the listening socket cannot be bound.
        """
        self._setup_logging()

        files = self.config.files_root or "(not configured)"
        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}, files root {files}")

        try:
            self._socket_server.start(self._handle_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")

        logger.info("Server stopped")

    def shutdown(self):
        """Stop accepting connections. In-flight connections finish on their own."""
        self._socket_server.shutdown()

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        return self._socket_server.wait_until_ready(timeout)

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

        logging.getLogger("tinyhttpd").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _handle_connection(self, conn: Connection):
        """
        Start a thread for a freshly accepted connection.

        Called on the accept loop's thread, so it must not block.
        """
        thread = threading.Thread(
            target=self._process_connection,
            args=(conn,),
            name=f"conn-{conn.id}",
            daemon=True,
        )

        try:
            thread.start()
        except RuntimeError as e:
            # Out of threads; drop this client, keep accepting
            logger.error(f"[{conn.id}] Cannot start connection thread: {e}")
            conn.close()

    def _process_connection(self, conn: Connection):
        """
        Serve exactly one request on `conn`, then close it.

        Runs on the connection's own thread. Every failure ends here;
        nothing propagates back to the accept loop.
        """
        with conn:
            try:
                self._exchange(conn)
            except Exception as e:
                logger.exception(f"[{conn.id}] Connection error: {e}")

    def _exchange(self, conn: Connection):
        # ─────────────────────────────────────────────────────────────────
        # READ + PARSE
        # ─────────────────────────────────────────────────────────────────
        reader = RequestReader(
            conn.reader,
            max_line_size=self.config.max_line_size,
            max_body_size=self.config.max_body_size,
        )

        try:
            request = reader.read_request(conn.address)
        except RequestParseError as e:
            if e.io_error:
                # Nobody left to answer
                logger.warning(f"[{conn.id}] Dropping connection from {conn.client_ip}: {e}")
                return

            logger.warning(f"[{conn.id}] Bad request from {conn.client_ip}: {e}")
            conn.send_response(bad_request().to_bytes())
            return

        logger.debug(f"[{conn.id}] {request.method.value} {request.path}")

        # ─────────────────────────────────────────────────────────────────
        # DISPATCH
        # ─────────────────────────────────────────────────────────────────
        conn.mark(ConnectionState.DISPATCHING)

        try:
            response = self._router.dispatch(request)
        except Exception as e:
            logger.exception(f"[{conn.id}] Handler error: {e}")
            response = internal_error()

        # ─────────────────────────────────────────────────────────────────
        # RESPOND
        # ─────────────────────────────────────────────────────────────────
        if conn.send_response(response.to_bytes()):
            log_request(conn.id, request, response, conn.age * 1000)
