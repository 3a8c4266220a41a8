"""
=============================================================================
DISPATCHER
=============================================================================

Turns one Request into one Response: middleware gates, then route lookup,
then the handler.

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                     Dispatcher.handle(request)                      │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   1. response = Response()        200 / text/plain / ""             │
    │                                                                      │
    │   2. middleware.run()  ── False ──►  return response (as the        │
    │          │ True                      rejecting gate left it)        │
    │          ▼                                                           │
    │   3. routes.match(method, path)                                      │
    │          │                                                           │
    │          ├── match ──► handler(request + path_params, response)     │
    │          │                                                           │
    │          └── none  ──► not_found (404), or 405 + Allow when the     │
    │                        path exists for another method and           │
    │                        method_not_allowed=True                      │
    │                                                                      │
    │   4. return response                                                 │
    │                                                                      │
    │   Any exception in 2 or 3  ──►  500 {"error": "Internal Server Error"}│
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

handle() never raises: every outcome, including failures, is a Response.

=============================================================================
"""

from dataclasses import replace
from typing import Callable, Optional, Union
import logging

from .http.request import HTTPMethod, Request
from .http.response import Response, error_response
from .http.router import Handler, RouteTable
from .http.status_codes import HTTPStatus
from .middleware.base import Gate, MiddlewareChain


logger = logging.getLogger(__name__)


class Dispatcher:
    """
    Runs the middleware chain and the route table for each request.

    Usage:
        dispatcher = Dispatcher()
        dispatcher.use(AuthMiddleware())

        @dispatcher.get("/api/users/:id")
        def get_user(request, response):
            ...

        response = dispatcher.handle(Request.from_target("GET", "/api/users/1"))
    """

    def __init__(
        self,
        routes: Optional[RouteTable] = None,
        middleware: Optional[MiddlewareChain] = None,
        method_not_allowed: bool = False,
    ):
        """
        Args:
            routes: Route table; a new empty one if not given.
            middleware: Middleware chain; a new empty one if not given.
            method_not_allowed: Answer 405 with an Allow header, instead of
                404, when the path is registered only for other methods.
        """
        self.routes = routes if routes is not None else RouteTable()
        self.middleware = middleware if middleware is not None else MiddlewareChain()
        self.method_not_allowed = method_not_allowed

    # =========================================================================
    # WIRING
    # =========================================================================

    def use(self, middleware: Gate) -> "Dispatcher":
        """Append a middleware to the chain. Returns self for chaining."""
        self.middleware.add(middleware)
        return self

    def register(self, method: Union[HTTPMethod, str], pattern: str, handler: Handler):
        return self.routes.register(method, pattern, handler)

    def route(self, method: Union[HTTPMethod, str], pattern: str) -> Callable[[Handler], Handler]:
        return self.routes.route(method, pattern)

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.routes.get(pattern)

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.routes.post(pattern)

    def put(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.routes.put(pattern)

    def delete(self, pattern: str) -> Callable[[Handler], Handler]:
        return self.routes.delete(pattern)

    # =========================================================================
    # DISPATCH
    # =========================================================================

    def handle(self, request: Request) -> Response:
        """
        Produce the response for a request.

        A handler that writes nothing yields 200 with an empty text/plain
        body.
        """
        response = Response()

        try:
            if not self.middleware.run(request, response):
                return response

            found = self.routes.match(request.method, request.path)
            if found is not None:
                found.handler(replace(request, path_params=found.params), response)
            else:
                self._handle_unmatched(request, response)

        except Exception:
            logger.exception(f"Unhandled error while dispatching {request.method} {request.path}")
            response = Response()
            error_response(response, HTTPStatus.INTERNAL_SERVER_ERROR, "Internal Server Error")

        return response

    __call__ = handle

    def _handle_unmatched(self, request: Request, response: Response) -> None:
        if self.method_not_allowed:
            allowed = self.routes.allowed_methods(request.path)
            if allowed:
                error_response(response, HTTPStatus.METHOD_NOT_ALLOWED, "Method Not Allowed")
                response.set_header("Allow", ", ".join(method.value for method in allowed))
                return

        self.routes.not_found(request, response)
