"""
=============================================================================
REQUEST LOGGING MIDDLEWARE
=============================================================================

Writes one access-log line per incoming request, before routing.

=============================================================================
WHY FIRST IN THE CHAIN?
=============================================================================

The logger is a gate that always says "continue". Placing it first means
it records every request, including the ones a later gate rejects:

    LoggingMiddleware  →  logs  GET /admin
    AuthMiddleware     →  401, stop

Because logging happens BEFORE routing, the line holds what the client
asked for (method, path, raw query string), not the status it got back.

=============================================================================
FORMATS
=============================================================================

    text:  127.0.0.1 - - [17/Oct/2026:10:15:02 +0000] "GET /api/hello?name=Alice"
    json:  {"method": "GET", "path": "/api/hello", "query": "name=Alice",
            "client_ip": "127.0.0.1", "user_agent": "curl/8.0",
            "timestamp": "17/Oct/2026:10:15:02 +0000"}

=============================================================================
"""

from dataclasses import asdict, dataclass
import json
import logging
import time

from .base import Middleware
from ..http.request import Request
from ..http.response import Response


# Namespaced so deployments can route access logs separately:
#   logging.getLogger("minirouter.access").addHandler(file_handler)
logger = logging.getLogger("minirouter.access")


@dataclass
class RequestLog:
    """Structured access-log entry for one request."""

    method: str
    path: str
    query: str
    client_ip: str
    user_agent: str
    timestamp: str

    def to_dict(self) -> dict:
        return asdict(self)

    def to_text(self) -> str:
        """Apache-style line, without the status and size columns."""
        target = f"{self.path}?{self.query}" if self.query else self.path
        return f'{self.client_ip or "-"} - - [{self.timestamp}] "{self.method} {target}"'


class LoggingMiddleware(Middleware):
    """
    Access-log middleware.

    Usage:
        chain.add(LoggingMiddleware())                   # text lines
        chain.add(LoggingMiddleware(log_format="json"))  # JSON lines
        chain.add(LoggingMiddleware(skip_paths=["/favicon.ico"]))
    """

    def __init__(
        self,
        log_format: str = "text",
        log_level: int = logging.INFO,
        skip_paths=None,
    ):
        """
        Args:
            log_format: "text" or "json".
            log_level: Level the access lines are logged at.
            skip_paths: Exact paths that are not logged.
        """
        if log_format not in ("text", "json"):
            raise ValueError(f"Unknown log format: {log_format!r}")
        self.log_format = log_format
        self.log_level = log_level
        self.skip_paths = set(skip_paths or [])

    def __call__(self, request: Request, response: Response) -> bool:
        if request.path in self.skip_paths:
            return True

        entry = RequestLog(
            method=request.method.value,
            path=request.path,
            query=request.query_string,
            client_ip=request.client_address[0],
            user_agent=request.get_header("User-Agent", "-"),
            timestamp=time.strftime("%d/%b/%Y:%H:%M:%S %z"),
        )

        if self.log_format == "json":
            logger.log(self.log_level, json.dumps(entry.to_dict()))
        else:
            logger.log(self.log_level, entry.to_text())

        return True
