"""
=============================================================================
MINIROUTER
=============================================================================

A minimal HTTP request router: an ordered route table with one trailing
path parameter, gate-style middleware, and a dispatcher that turns every
request into a response value. A small sequential socket server makes it
runnable.

    ┌─────────────────────────────────────────────────────────────────────┐
    │                          PACKAGE LAYOUT                             │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   dispatcher.py    Dispatcher: middleware → route → handler         │
    │   http/            Request, Response, matcher, RouteTable           │
    │   middleware/      MiddlewareChain + logging, auth, CORS gates      │
    │   handlers/        Demo handlers and the in-memory UserStore        │
    │   core/            Sequential TCP accept loop, Connection           │
    │   server.py        HTTPServer: transport + dispatcher               │
    │   app.py           create_app(): the demo application               │
    │   config.py        ServerConfig                                     │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Quick start:

    from minirouter import Dispatcher, Request, json_response

    dispatcher = Dispatcher()

    @dispatcher.get("/api/users/:id")
    def get_user(request, response):
        json_response(response, 200, {"id": request.path_params["id"]})

    response = dispatcher.handle(Request.from_target("GET", "/api/users/42"))

=============================================================================
"""

__version__ = "1.0.0"

from .config import ServerConfig
from .dispatcher import Dispatcher
from .http import HTTPMethod, Request, Response, RouteTable, error_response, json_response
from .middleware import MiddlewareChain
from .server import HTTPServer
from .app import create_app

__all__ = [
    "Dispatcher",
    "HTTPMethod",
    "HTTPServer",
    "MiddlewareChain",
    "Request",
    "Response",
    "RouteTable",
    "ServerConfig",
    "create_app",
    "error_response",
    "json_response",
    "__version__",
]
