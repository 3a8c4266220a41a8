"""
=============================================================================
MIDDLEWARE CHAIN
=============================================================================

Defines the middleware contract and the ordered chain that runs before
routing.

=============================================================================
GATE MODEL
=============================================================================

Each middleware is a GATE: it looks at the request, may write to the
response, and answers one question: should processing continue?

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    MIDDLEWARE CHAIN - ONE REQUEST                   │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Request                                                            │
    │      │                                                               │
    │      ▼                                                               │
    │   ┌──────────┐ True  ┌──────────┐ True  ┌──────────┐ True            │
    │   │ Logging  │──────►│   Auth   │──────►│   CORS   │──────► ROUTING  │
    │   └──────────┘       └────┬─────┘       └──────────┘                 │
    │                           │ False                                    │
    │                           ▼                                          │
    │                  response = 401 {"error": "Unauthorized"}            │
    │                  STOP. No later middleware, no handler.              │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Unlike a wrap-around (onion) pipeline there is no "after" phase: every
gate runs before routing, in registration order.

=============================================================================
ORDER MATTERS
=============================================================================

    chain.add(LoggingMiddleware())   # sees EVERY request, even rejected ones
    chain.add(AuthMiddleware())      # rejects before any handler runs
    chain.add(CORSMiddleware())      # only reached by accepted requests

Register the logger after the auth gate and rejected requests vanish from
the access log.

=============================================================================
THE CONTRACT
=============================================================================

    def my_gate(request: Request, response: Response) -> bool:
        if not acceptable(request):
            response.set_json(400, '{"error": "..."}')   # terminal response
            return False                                 # stop
        return True                                      # continue

A gate that returns False owns the response: the dispatcher adds nothing.

=============================================================================
"""

from abc import ABC, abstractmethod
from typing import Callable, Iterator, List, Optional
import logging

from ..http.request import Request
from ..http.response import Response


logger = logging.getLogger(__name__)


# A gate takes the request and the response being built, and returns
# True to continue or False to stop.
Gate = Callable[[Request, Response], bool]


class Middleware(ABC):
    """
    Base class for class-based middleware.

    Subclasses implement __call__(request, response) -> bool. Any plain
    callable with that signature works in a MiddlewareChain too; the class
    only adds a readable name for logs.
    """

    @abstractmethod
    def __call__(self, request: Request, response: Response) -> bool:
        """
        Inspect the request, optionally write to the response.

        Returns:
            True to continue with the next middleware, False to stop. When
            returning False the response must already hold the final status
            and body.
        """

    @property
    def name(self) -> str:
        """Middleware name for logging."""
        return self.__class__.__name__


class FunctionMiddleware(Middleware):
    """
    Wraps a plain function as middleware.

    Usage:
        def require_json(request, response):
            ...
            return True

        chain.add(FunctionMiddleware(require_json))
    """

    def __init__(self, func: Gate, name: Optional[str] = None):
        self._func = func
        self._name = name or getattr(func, "__name__", repr(func))

    def __call__(self, request: Request, response: Response) -> bool:
        return self._func(request, response)

    @property
    def name(self) -> str:
        return self._name


def function_middleware(func: Gate) -> FunctionMiddleware:
    """
    Decorator turning a function into middleware.

    Usage:
        @function_middleware
        def block_deletes(request, response):
            if request.method is HTTPMethod.DELETE:
                error_response(response, 405, "Deletes are disabled")
                return False
            return True

        chain.add(block_deletes)
    """
    return FunctionMiddleware(func)


class MiddlewareChain:
    """
    Ordered sequence of gates with short-circuit execution.

    Populated once at startup, then only read by run().
    """

    def __init__(self):
        self._middleware: List[Gate] = []

    def add(self, middleware: Gate) -> "MiddlewareChain":
        """
        Append a middleware.

        Returns:
            Self, so calls chain: chain.add(a).add(b)
        """
        self._middleware.append(middleware)
        logger.debug(f"Added middleware: {_name_of(middleware)}")
        return self

    register = add

    def use(self, *middleware: Gate) -> "MiddlewareChain":
        """Append several middleware at once, in the given order."""
        for mw in middleware:
            self.add(mw)
        return self

    def run(self, request: Request, response: Response) -> bool:
        """
        Run every middleware in registration order.

        Stops at the first one returning False.

        Returns:
            True if all middleware let the request through, False if one
            stopped it (its response is final).
        """
        for middleware in self._middleware:
            if not middleware(request, response):
                logger.debug(
                    f"{_name_of(middleware)} stopped {request.method} {request.path} "
                    f"with {response.status_code}"
                )
                return False
        return True

    def __len__(self) -> int:
        return len(self._middleware)

    def __iter__(self) -> Iterator[Gate]:
        return iter(self._middleware)


def _name_of(middleware: Gate) -> str:
    if isinstance(middleware, Middleware):
        return middleware.name
    return getattr(middleware, "__name__", type(middleware).__name__)
