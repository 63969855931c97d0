"""
=============================================================================
ACCESS LOG
=============================================================================

One line per answered request, in a format log tools already understand:

    127.0.0.1 - - [18/Oct/2026:14:03:11 +0000] "GET /echo/abc" 200 3 0.41ms [1f0c9a2e]
    ─────┬───       ──────────┬────────────────  ─────┬──────  ─┬─ ┬ ──┬──  ────┬────
         │                    │                       │         │  │   │        │
     client IP            timestamp            method + path   │  │ duration  connection id
                                                            status │
                                                               body bytes

Lines go to the "tinyhttpd.access" logger, separate from the diagnostic
loggers, so they can be routed on their own:

    logging.getLogger("tinyhttpd.access").addHandler(file_handler)

Connections that never produced a request (client hung up, read failed)
are not access-logged; they appear as warnings from tinyhttpd.server.

=============================================================================
"""

import logging
import time
from dataclasses import dataclass

from .http.request import HTTPRequest
from .http.response import HTTPResponse

logger = logging.getLogger("tinyhttpd.access")


@dataclass
class RequestLog:
    """
    Structured access log entry.

    connection_id:  Short id shared with the connection's other log lines
    method:         GET or POST
    path:           Raw request path
    client_ip:      Peer address
    user_agent:     User-Agent header, "-" if absent
    status_code:    Response status
    content_length: Response body size in bytes
    duration_ms:    Time from accept to response written
    timestamp:      Apache-style local time
    """

    connection_id: str
    method: str
    path: str
    client_ip: str
    user_agent: str
    status_code: int
    content_length: int
    duration_ms: float
    timestamp: str

    @classmethod
    def build(
        cls,
        connection_id: str,
        request: HTTPRequest,
        response: HTTPResponse,
        duration_ms: float,
    ) -> "RequestLog":
        return cls(
            connection_id=connection_id,
            method=request.method.value,
            path=request.path,
            client_ip=request.client_address[0] or "-",
            user_agent=request.user_agent or "-",
            status_code=response.status.code,
            content_length=len(response.body),
            duration_ms=duration_ms,
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

    def to_text(self) -> str:
        """Format in Apache common-log style with duration and connection id."""
        return (
            f'{self.client_ip} - - [{self.timestamp}] '
            f'"{self.method} {self.path}" {self.status_code} '
            f'{self.content_length} {self.duration_ms:.2f}ms [{self.connection_id}]'
        )


def log_request(
    connection_id: str,
    request: HTTPRequest,
    response: HTTPResponse,
    duration_ms: float,
) -> RequestLog:
    """Emit one access line at INFO and return the entry."""
    entry = RequestLog.build(connection_id, request, response, duration_ms)
    logger.info(entry.to_text())
    return entry
