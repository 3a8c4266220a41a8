"""
Authorization gate.

Protects path prefixes by requiring an ``Authorization`` header. Only the
header's presence is checked; validating tokens is left to the application.

    GET /admin                          →  401 {"error": "Unauthorized"}
    GET /admin  (Authorization: ...)    →  continues to the admin handler
    GET /api/users                      →  not protected, continues
"""

from typing import Iterable
import logging

from .base import Middleware
from ..http.request import Request
from ..http.response import Response, error_response
from ..http.status_codes import HTTPStatus


logger = logging.getLogger(__name__)


class AuthMiddleware(Middleware):
    """
    Rejects requests to protected prefixes that carry no Authorization header.

    Prefixes are plain string prefixes: "/admin" also protects
    "/admin/users" and "/administrator".
    """

    def __init__(self, protected_prefixes: Iterable[str] = ("/admin",), header: str = "Authorization"):
        self.protected_prefixes = tuple(protected_prefixes)
        self.header = header

    def is_protected(self, path: str) -> bool:
        return path.startswith(self.protected_prefixes)

    def __call__(self, request: Request, response: Response) -> bool:
        if not self.is_protected(request.path):
            return True

        # Header names are compared case-insensitively by get_header.
        if request.get_header(self.header).strip():
            return True

        logger.info(f"Rejected {request.method} {request.path}: missing {self.header} header")
        error_response(response, HTTPStatus.UNAUTHORIZED, "Unauthorized")
        return False
