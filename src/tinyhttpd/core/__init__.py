"""
=============================================================================
CORE NETWORKING
=============================================================================

The transport layer under the HTTP code: a listening socket and a wrapper
for each accepted client.

    ┌─────────────────────────────────────────────────────────────────────┐
    │   SocketServer           Connection                                 │
    │   ────────────           ──────────                                 │
    │   bind / listen          one client socket                          │
    │   accept loop     ──►    buffered reader                            │
    │   signals, shutdown      sendall, graceful close                    │
    └─────────────────────────────────────────────────────────────────────┘

THREAD-PER-CONNECTION
   The accept loop never does request work itself. Each Connection is
   handed to a callback that starts a thread for it, so one slow client
   never holds up the next accept().

=============================================================================
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState

__all__ = [
    "SocketServer",     # Listening socket and accept loop
    "Connection",       # One client socket, one exchange
    "ConnectionState",  # Lifecycle states for logging
]
