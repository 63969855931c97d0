"""
=============================================================================
ROUTE HANDLERS
=============================================================================

The server's fixed set of endpoints, assembled into a Router.

    ┌──────────────────┬────────┬──────────────────────────────────────────┐
    │  Path            │ Method │  Response                                │
    ├──────────────────┼────────┼──────────────────────────────────────────┤
    │  /               │  any   │  200, no content                         │
    │  /user-agent     │  any   │  200 text/plain: the User-Agent value    │
    │  /echo/<text>    │  any   │  200 text/plain: <text>, verbatim        │
    │  /files/<name>   │  GET   │  200 octet-stream: file bytes, or 404    │
    │  /files/<name>   │  POST  │  201 after writing the body, or 500      │
    │  anything else   │  any   │  404, no content                         │
    └──────────────────┴────────┴──────────────────────────────────────────┘

=============================================================================
FAILURE MAPPING
=============================================================================

    Missing User-Agent header      → PreconditionError → 400
    POST without Content-Length    → PreconditionError → 400
    No files directory configured  → 500 (logged as an error)
    Name escapes the files root    → 404 (logged as a warning)
    File missing / unreadable      → 404
    Write failed                   → 500

=============================================================================
"""

import logging
from typing import Optional

from ..http.request import HTTPRequest
from ..http.response import (
    HTTPResponse,
    created,
    file_response,
    internal_error,
    not_found,
    ok,
    text_response,
)
from ..http.router import PreconditionError, Router
from .files import FileStore, OutsideRootError

logger = logging.getLogger(__name__)


def index(request: HTTPRequest) -> HTTPResponse:
    """GET / - liveness check, nothing to say."""
    return ok()


def user_agent(request: HTTPRequest) -> HTTPResponse:
    """Reflect the client's User-Agent header back as text/plain."""
    agent = request.user_agent
    if agent is None:
        raise PreconditionError("missing User-Agent header")
    return text_response(agent)


def echo(request: HTTPRequest, text: str) -> HTTPResponse:
    """Return everything after /echo/ as text/plain."""
    return text_response(text)


class FileRoutes:
    """
    GET and POST handlers for /files/<name>.

    Holds an optional FileStore. Without one, both handlers answer 500:
    the route exists but the server was started without --directory.
    """

    def __init__(self, store: Optional[FileStore]):
        self.store = store

    def read(self, request: HTTPRequest, name: str) -> HTTPResponse:
        if self.store is None:
            logger.error(f"GET /files/{name}: no files directory configured")
            return internal_error()

        try:
            data = self.store.read(name)
        except OutsideRootError as e:
            logger.warning(f"Rejected read: {e}")
            return not_found()
        except OSError as e:
            logger.debug(f"Cannot read {name!r}: {e}")
            return not_found()

        return file_response(data)

    def write(self, request: HTTPRequest, name: str) -> HTTPResponse:
        if self.store is None:
            logger.error(f"POST /files/{name}: no files directory configured")
            return internal_error()

        if request.body is None:
            raise PreconditionError("POST without Content-Length")

        try:
            self.store.write(name, request.body)
        except OutsideRootError as e:
            logger.warning(f"Rejected write: {e}")
            return not_found()
        except OSError as e:
            logger.error(f"Cannot write {name!r}: {e}")
            return internal_error()

        return created()


def build_router(store: Optional[FileStore] = None) -> Router:
    """
    Build the route table.

    Registration order is match order; the exact routes come first so
    that "/" never falls through to a wildcard.

    Args:
        store: Backing store for /files/<name>, or None if unconfigured.

    Returns:
        A Router ready to dispatch requests.
    """
    files = FileRoutes(store)

    router = Router()
    router.add_route("/", index)
    router.add_route("/user-agent", user_agent)
    router.add_route("/echo/*text", echo)
    router.get("/files/*name")(files.read)
    router.post("/files/*name")(files.write)
    return router
