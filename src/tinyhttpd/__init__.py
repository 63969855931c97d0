"""
=============================================================================
TINYHTTPD - A Minimal HTTP/1.1 Server on Raw Sockets
=============================================================================

Accepts TCP connections, reads ONE request per connection, answers it and
closes. Five routes:

    GET  /                  → 200
    ANY  /user-agent        → echoes the User-Agent header
    ANY  /echo/<text>       → echoes <text>
    GET  /files/<name>      → file contents from --directory
    POST /files/<name>      → stores the request body as that file

=============================================================================
PACKAGE STRUCTURE
=============================================================================

    tinyhttpd/
    ├── __init__.py          # This file - package exports
    ├── __main__.py          # CLI entry point (python -m tinyhttpd)
    ├── server.py            # HTTPServer: thread per connection
    ├── config.py            # ServerConfig frozen dataclass
    ├── access_log.py        # One access line per answered request
    ├── core/
    │   ├── socket_server.py # Listening socket, accept loop, signals
    │   └── connection.py    # One client socket
    ├── http/
    │   ├── request.py       # Stream reader → HTTPRequest
    │   ├── response.py      # HTTPResponse → bytes
    │   ├── router.py        # Ordered route table
    │   └── status_codes.py  # 200/201/400/404/500
    └── handlers/
        ├── routes.py        # The endpoints above
        └── files.py         # FileStore confined to one directory

=============================================================================
QUICK START
=============================================================================

    from tinyhttpd import HTTPServer, ServerConfig

    server = HTTPServer(ServerConfig(files_root="/tmp/data"))
    server.run()

    $ curl -i http://127.0.0.1:4221/echo/hello
    HTTP/1.1 200 OK
    Content-Type: text/plain
    Content-Length: 5

    hello

=============================================================================
"""

__version__ = "1.0.0"

from .server import HTTPServer
from .config import ServerConfig

__all__ = ["HTTPServer", "ServerConfig", "__version__"]
