"""
=============================================================================
HTTP ROUTER
=============================================================================

Maps a request path to the handler that serves it.

=============================================================================
HOW ROUTING WORKS
=============================================================================

The router holds an ORDERED table. Each entry is a pattern, the methods it
accepts, and a handler. The first entry whose pattern and method both
match wins:

    ┌─────────────────────────────────────────────────────────────────────┐
    │                       ROUTE TABLE                                   │
    ├──────────────────┬──────────┬───────────────────────────────────────┤
    │  Pattern         │  Methods │  Handler                              │
    ├──────────────────┼──────────┼───────────────────────────────────────┤
    │  /               │  any     │  index          → 200                 │
    │  /user-agent     │  any     │  user_agent     → 200 text/plain      │
    │  /echo/*text     │  any     │  echo           → 200 text/plain      │
    │  /files/*name    │  GET     │  read_file      → 200 octet-stream    │
    │  /files/*name    │  POST    │  write_file     → 201                 │
    └──────────────────┴──────────┴───────────────────────────────────────┘

    Nothing matched?  → 404 Not Found, no content

=============================================================================
PATTERN SYNTAX
=============================================================================

Only two kinds of pattern are needed:

    EXACT      /user-agent    matches "/user-agent" and nothing else
    WILDCARD   /echo/*text    matches "/echo/" followed by ANYTHING,
                              slashes included, captured as `text`

    Pattern: /echo/*text
    Path:    /echo/a/b%20c
    Params:  {"text": "a/b%20c"}        ← verbatim, not decoded

The wildcard may capture the empty string ("/echo/" → text == "").
Paths are NOT normalized: "/user-agent/" does not match "/user-agent",
and a trailing slash inside a wildcard is part of the capture.

=============================================================================
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, List, Optional

from .request import HTTPRequest, Method
from .response import HTTPResponse, empty_response, not_found
from .status_codes import HTTPStatus

logger = logging.getLogger(__name__)


# Handler: takes the request plus any captured params, returns a response.
#     def echo(request, text): ...
Handler = Callable[..., HTTPResponse]


class PreconditionError(Exception):
    """
    Raised by a handler when the request lacks something the route needs.

    The router turns it into an empty response with `status`
    (400 Bad Request unless the handler says otherwise).

    Example:
        if request.user_agent is None:
            raise PreconditionError("missing User-Agent header")
    """

    def __init__(self, message: str, status: HTTPStatus = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status = status


@dataclass
class Route:
    """
    A single entry in the route table.

        Route(
            path="/files/*name",            # pattern as registered
            methods=frozenset({Method.GET}),# None = any method
            handler=read_file,
            _pattern=<compiled>,            # ^/files/(?P<name>.*)$
        )
    """

    path: str
    methods: Optional[FrozenSet[Method]]
    handler: Handler
    _pattern: Optional[re.Pattern] = field(default=None, repr=False)

    def accepts(self, method: Method) -> bool:
        return self.methods is None or method in self.methods


@dataclass
class RouteMatch:
    """
    Result of a successful route match.

    Example:
        Pattern: /echo/*text
        Path:    /echo/abc
        Result:  RouteMatch(route=<Route>, params={"text": "abc"})
    """

    route: Route
    params: Dict[str, str]


class Router:
    """
    Ordered route table with exact and trailing-wildcard patterns.

    ==========================================================================
    USAGE
    ==========================================================================

        router = Router()

        @router.route("/echo/*text")
        def echo(request, text):
            return text_response(text)

        @router.post("/files/*name")
        def write_file(request, name):
            ...

        response = router.dispatch(request)

    ==========================================================================
    """

    def __init__(self):
        self._routes: List[Route] = []

    @property
    def routes(self) -> List[Route]:
        """Registered routes in match order."""
        return list(self._routes)

    # =========================================================================
    # ROUTE REGISTRATION
    # =========================================================================

    def add_route(
        self,
        path: str,
        handler: Handler,
        methods: Optional[FrozenSet[Method]] = None,
    ) -> Route:
        """
        Append a route to the table.

        Args:
            path: Exact path ("/user-agent") or wildcard ("/echo/*text")
            handler: Called as handler(request, **params)
            methods: Methods to accept (None for any)

        Returns:
            The registered Route object
        """
        if not path.startswith("/"):
            raise ValueError(f"Route path must start with '/': {path!r}")

        route = Route(
            path=path,
            methods=methods,
            handler=handler,
            _pattern=self._compile_pattern(path),
        )
        self._routes.append(route)
        return route

    def _compile_pattern(self, path: str) -> re.Pattern:
        """
        Compile a route pattern into a regex.

        =====================================================================
        PATTERN COMPILATION
        =====================================================================

            "/"             → ^/$
            "/user-agent"   → ^/user\\-agent$
            "/files/*name"  → ^/files/(?P<name>.*)$

        Everything before the "*" is escaped and must match literally.
        A wildcard is only allowed as the final segment.

        =====================================================================
        """
        prefix, star, param_name = path.partition("*")

        if not star:
            return re.compile(f"^{re.escape(path)}$")

        if not prefix.endswith("/") or "/" in param_name:
            raise ValueError(f"Wildcard must be the last segment: {path!r}")

        param_name = param_name or "wildcard"
        # DOTALL so that a capture is never cut short by an odd byte
        return re.compile(f"^{re.escape(prefix)}(?P<{param_name}>.*)$", re.DOTALL)

    # =========================================================================
    # ROUTE MATCHING
    # =========================================================================

    def match(self, method: Method, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Order matters: first-registered, first-matched.
        """
        for route in self._routes:
            if not route.accepts(method):
                continue

            found = route._pattern.match(path) if route._pattern else None
            if found:
                return RouteMatch(route=route, params=found.groupdict())

        return None

    def dispatch(self, request: HTTPRequest) -> HTTPResponse:
        """
        Route a request to its handler and return the handler's response.

        1. Find matching route (none → 404)
        2. Call handler(request, **params)
        3. PreconditionError → empty response with its status

        Any other exception propagates to the connection handler.
        """
        found = self.match(request.method, request.path)
        if found is None:
            logger.debug(f"No route for {request.method.value} {request.path}")
            return not_found()

        try:
            return found.route.handler(request, **found.params)
        except PreconditionError as e:
            logger.warning(
                f"{request.method.value} {request.path}: {e} "
                f"(responding {e.status.code})"
            )
            return empty_response(e.status)

    # =========================================================================
    # DECORATOR-STYLE ROUTE REGISTRATION
    # =========================================================================

    def route(
        self,
        path: str,
        methods: Optional[FrozenSet[Method]] = None,
    ) -> Callable[[Handler], Handler]:
        """Decorator for registering a route. Returns the handler unchanged."""
        def decorator(handler: Handler) -> Handler:
            self.add_route(path, handler, methods)
            return handler
        return decorator

    def get(self, path: str) -> Callable[[Handler], Handler]:
        """Register a GET-only route."""
        return self.route(path, frozenset({Method.GET}))

    def post(self, path: str) -> Callable[[Handler], Handler]:
        """Register a POST-only route."""
        return self.route(path, frozenset({Method.POST}))
