"""
=============================================================================
HANDLERS MODULE
=============================================================================

The endpoints this server exposes and the file store behind /files.

    routes.py   build_router() and the handler functions
    files.py    FileStore, confined to one root directory

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    REQUEST → HANDLER → RESPONSE                     │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │    Request                 Handler                 Response         │
    │   ┌──────────┐          ┌──────────┐           ┌──────────┐        │
    │   │ POST     │          │          │           │ 201      │        │
    │   │ /files/a │ ───────▶ │ FileStore│ ────────▶ │ Created  │        │
    │   │ body=abc │          │ .write() │           │          │        │
    │   └──────────┘          └──────────┘           └──────────┘        │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
USAGE
=============================================================================

    from tinyhttpd.handlers import FileStore, build_router

    router = build_router(FileStore("/tmp/data"))
    response = router.dispatch(request)

=============================================================================
"""

from .files import FileStore, OutsideRootError
from .routes import FileRoutes, PreconditionError, build_router, echo, index, user_agent

__all__ = [
    "FileStore",
    "OutsideRootError",
    "FileRoutes",
    "PreconditionError",
    "build_router",
    "echo",
    "index",
    "user_agent",
]
