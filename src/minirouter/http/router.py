"""
=============================================================================
ROUTE TABLE
=============================================================================

An ordered list of (method, pattern, handler) entries with first-match-wins
lookup.

=============================================================================
ROUTING FLOW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                        ROUTING FLOW                                 │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   resolve(GET, "/api/users/42")                                      │
    │        │                                                             │
    │        ▼   scan in REGISTRATION order                                │
    │   ┌─────────────────────────────────────────────────────────────┐   │
    │   │  GET    /                  → handle_home        method ok,  │   │
    │   │                                                 path ✗      │   │
    │   │  GET    /api/users         → users.list         path ✗      │   │
    │   │  POST   /api/users         → users.create       method ✗    │   │
    │   │  GET    /api/users/:id     → users.get          ← MATCH!    │   │
    │   │  DELETE /api/users/:id     → users.delete       (not tried) │   │
    │   └─────────────────────────────────────────────────────────────┘   │
    │        │                                                             │
    │        ▼                                                             │
    │   users.get      (params: {"id": "42"})                              │
    │                                                                      │
    │   Nothing matched?  →  the table's not-found handler (404)           │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
ORDER IS PRIORITY
=============================================================================

No sorting and no deduplication: the first registered route that matches
wins. Because parameterized patterns are prefix matches, a specific route
must be registered BEFORE an overlapping parameterized one:

    table.get("/api/users/me", handle_me)      # must come first
    table.get("/api/users/:id", users.get)

Reversed, /api/users/me would be handled by users.get with id="me".

=============================================================================
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List, Optional, Union
import logging

from . import matcher
from .request import HTTPMethod, Request
from .response import Response, error_response
from .status_codes import HTTPStatus


logger = logging.getLogger(__name__)


# Handler: takes the request and the response to fill in; returns nothing.
Handler = Callable[[Request, Response], None]


def handle_not_found(request: Request, response: Response) -> None:
    """Default handler when no route matches: 404 {"error": "Route not found"}."""
    error_response(response, HTTPStatus.NOT_FOUND, "Route not found")


@dataclass(frozen=True)
class Route:
    """
    One registered route.

    Immutable: once registered, a route's method, pattern and handler never
    change.
    """

    method: HTTPMethod
    pattern: str
    handler: Handler

    @property
    def param_name(self) -> Optional[str]:
        """Name of the trailing parameter ("id" for /api/users/:id)."""
        return matcher.param_name(self.pattern)

    def matches(self, method: HTTPMethod, path: str) -> bool:
        return self.method == method and matcher.matches(self.pattern, path)


@dataclass(frozen=True)
class RouteMatch:
    """
    Result of a successful lookup.

    Example:
        Pattern: /api/users/:id
        Path:    /api/users/42
        Result:  RouteMatch(route=<Route>, params={"id": "42"})
    """

    route: Route
    params: Dict[str, str]

    @property
    def handler(self) -> Handler:
        return self.route.handler


class RouteTable:
    """
    Ordered route registry.

    ==========================================================================
    USAGE
    ==========================================================================

        table = RouteTable()

        table.register(HTTPMethod.GET, "/api/users", users.list)

        @table.get("/api/users/:id")
        def get_user(request, response):
            user_id = request.path_params["id"]
            ...

        handler = table.resolve(HTTPMethod.GET, "/api/users/42")

    ==========================================================================
    """

    def __init__(self, not_found: Handler = handle_not_found):
        """
        Args:
            not_found: Handler returned by resolve() when nothing matches.
        """
        self._routes: List[Route] = []
        self.not_found = not_found

    # =========================================================================
    # REGISTRATION
    # =========================================================================

    def register(
        self,
        method: Union[HTTPMethod, str],
        pattern: str,
        handler: Handler,
    ) -> Route:
        """
        Append a route.

        Args:
            method: HTTPMethod or its name ("GET", "POST", ...).
            pattern: Literal path, optionally ending in one ":name" segment.
            handler: Callable taking (request, response).

        Returns:
            The registered Route.

        Raises:
            ValueError: Unknown method or unsupported pattern.
        """
        method = _coerce_method(method)
        matcher.validate_pattern(pattern)

        route = Route(method=method, pattern=pattern, handler=handler)
        self._routes.append(route)
        logger.debug(f"Registered route {method} {pattern}")
        return route

    def route(self, method: Union[HTTPMethod, str], pattern: str) -> Callable[[Handler], Handler]:
        """
        Decorator form of register().

        The handler is returned unchanged so decorators can be stacked.
        """
        def decorator(handler: Handler) -> Handler:
            self.register(method, pattern, handler)
            return handler
        return decorator

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self.route(HTTPMethod.GET, pattern)

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self.route(HTTPMethod.POST, pattern)

    def put(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self.route(HTTPMethod.PUT, pattern)

    def delete(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a DELETE route."""
        return self.route(HTTPMethod.DELETE, pattern)

    # =========================================================================
    # LOOKUP
    # =========================================================================

    def match(self, method: HTTPMethod, path: str) -> Optional[RouteMatch]:
        """
        Find the first route matching method and path.

        Returns:
            RouteMatch with the captured parameter (if any), or None.
        """
        for route in self._routes:
            if not route.matches(method, path):
                continue

            params: Dict[str, str] = {}
            name = route.param_name
            value = matcher.extract_param(route.pattern, path)
            if name is not None and value is not None:
                params[name] = value
            return RouteMatch(route=route, params=params)

        return None

    def resolve(self, method: HTTPMethod, path: str) -> Handler:
        """
        Find the handler for method and path.

        Deterministic: with unchanged registrations the same inputs always
        return the same handler object, and the not-found handler when no
        route matches.
        """
        found = self.match(method, path)
        if found is None:
            return self.not_found
        return found.handler

    def allowed_methods(self, path: str) -> List[HTTPMethod]:
        """
        Methods registered for patterns matching path, in registration order.

        Used to build the Allow header of a 405 response.
        """
        methods: List[HTTPMethod] = []
        for route in self._routes:
            if matcher.matches(route.pattern, path) and route.method not in methods:
                methods.append(route.method)
        return methods

    # =========================================================================
    # INTROSPECTION
    # =========================================================================

    def routes(self) -> List[Route]:
        """All routes in priority order."""
        return list(self._routes)

    def describe(self) -> str:
        """
        Human-readable route listing, logged at startup.

        Example output:
            GET      /
            GET      /api/users
            POST     /api/users
            GET      /api/users/:id
        """
        return "\n".join(f"  {route.method.value:8} {route.pattern}" for route in self._routes)

    def __len__(self) -> int:
        return len(self._routes)

    def __iter__(self) -> Iterator[Route]:
        return iter(self._routes)


def _coerce_method(method: Union[HTTPMethod, str]) -> HTTPMethod:
    if isinstance(method, HTTPMethod):
        parsed = method
    else:
        parsed = HTTPMethod.parse(method.upper())
    if parsed is HTTPMethod.UNSUPPORTED:
        raise ValueError(f"Cannot register a route for method {method!r}")
    return parsed
