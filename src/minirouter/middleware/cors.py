"""
=============================================================================
CORS MIDDLEWARE
=============================================================================

Adds Cross-Origin Resource Sharing headers so browser JavaScript served from
another origin can read the API's responses.

    Browser at https://frontend.example  ──GET /api/users──►  this server
                                           ◄── 200
                                               Access-Control-Allow-Origin: *

The gate writes the headers before routing and always continues. Handlers
mutate the same Response afterwards, so the headers survive into the final
serialized response unless a handler removes them.

Preflight (OPTIONS) requests are outside the closed method set and therefore
are not answered here.

=============================================================================
"""

from typing import Iterable, Optional

from .base import Middleware
from ..http.request import Request
from ..http.response import Response


class CORSMiddleware(Middleware):
    """
    Adds Access-Control-* headers to every response.

    Usage:
        chain.add(CORSMiddleware())                                    # any origin
        chain.add(CORSMiddleware(allow_origin="https://app.example"))
    """

    def __init__(
        self,
        allow_origin: str = "*",
        allow_methods: Optional[Iterable[str]] = ("GET", "POST", "PUT", "DELETE"),
        allow_headers: Optional[Iterable[str]] = ("Content-Type", "Authorization"),
    ):
        self.allow_origin = allow_origin
        self.allow_methods = list(allow_methods or [])
        self.allow_headers = list(allow_headers or [])

    def __call__(self, request: Request, response: Response) -> bool:
        response.set_header("Access-Control-Allow-Origin", self.allow_origin)
        if self.allow_methods:
            response.set_header("Access-Control-Allow-Methods", ", ".join(self.allow_methods))
        if self.allow_headers:
            response.set_header("Access-Control-Allow-Headers", ", ".join(self.allow_headers))

        # A specific origin makes the response vary by Origin for caches.
        if self.allow_origin != "*":
            response.set_header("Vary", "Origin")
        return True
