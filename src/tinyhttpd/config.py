"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

Everything the server needs to know at startup, in one immutable value.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m tinyhttpd --directory /tmp/data                 │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── HTTP_DIRECTORY=/tmp/data python -m tinyhttpd              │
    │                                                                      │
    │   3. Default values (in this dataclass)                             │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

The config is built once and then shared by every connection thread.
It is frozen, so no thread can change it under another's feet. To derive
a variant, use dataclasses.replace():

    config = replace(ServerConfig.from_env(), port=0)

=============================================================================
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional


@dataclass(frozen=True)
class ServerConfig:
    """
    Configuration for the HTTP server.

    NETWORK       host, port, backlog, timeout
    REQUESTS      max_line_size, max_body_size
    FILES         files_root
    LOGGING       log_level
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """Address to bind. Localhost only by default."""

    port: int = 4221
    """Port to listen on. 0 asks the OS for a free port (tests)."""

    backlog: int = 128
    """Maximum number of queued, not-yet-accepted connections."""

    timeout: Optional[float] = None
    """
    Per-connection socket timeout in seconds.
    None = block forever on a silent client (one thread is parked).
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_line_size: int = 8192
    """Longest start line or header line accepted, in bytes."""

    max_body_size: int = 10 * 1024 * 1024  # 10 MB
    """Largest Content-Length accepted, in bytes."""

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    files_root: Optional[str] = None
    """
    Directory backing /files/<name>.
    None = the route exists but answers 500.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        HTTP_HOST        Server host (default: 127.0.0.1)
        HTTP_PORT        Server port (default: 4221)
        HTTP_DIRECTORY   Files root (default: unset)
        HTTP_TIMEOUT     Socket timeout in seconds (default: unset)
        HTTP_LOG_LEVEL   Logging level (default: INFO)

        Raises:
            ValueError: If HTTP_PORT or HTTP_TIMEOUT is not a number.
        """
        timeout = os.getenv("HTTP_TIMEOUT")

        return cls(
            host=os.getenv("HTTP_HOST", "127.0.0.1"),
            port=int(os.getenv("HTTP_PORT", "4221")),
            timeout=float(timeout) if timeout else None,
            files_root=os.getenv("HTTP_DIRECTORY") or None,
            log_level=os.getenv("HTTP_LOG_LEVEL", "INFO"),
        )

    def validate(self) -> None:
        """
        Validate configuration values. Called once at startup.

        Raises:
            ValueError: On the first invalid value found.
        """
        if not 0 <= self.port < 65536:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.max_line_size < 64:
            raise ValueError("max_line_size must be >= 64")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if not isinstance(logging.getLevelName(self.log_level.upper()), int):
            raise ValueError(f"Unknown log level: {self.log_level}")

        if self.files_root is not None and not Path(self.files_root).is_dir():
            raise ValueError(f"files_root is not a directory: {self.files_root}")
