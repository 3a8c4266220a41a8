"""
Demo application wiring.

    LoggingMiddleware → AuthMiddleware → CORSMiddleware → routes

    GET    /                 handle_home
    GET    /api/hello        handle_hello
    GET    /api/time         handle_time
    GET    /api/users        users.list
    POST   /api/users        users.create
    GET    /api/users/:id    users.get
    DELETE /api/users/:id    users.delete
    GET    /admin            handle_admin   (requires Authorization)
"""

from typing import Optional

from .config import ServerConfig
from .handlers import UserHandlers, UserStore, handle_admin, handle_hello, handle_home, handle_time
from .http.request import HTTPMethod
from .middleware import AuthMiddleware, CORSMiddleware, LoggingMiddleware
from .server import HTTPServer


def create_app(config: Optional[ServerConfig] = None, store: Optional[UserStore] = None) -> HTTPServer:
    """
    Build the demo server.

    Args:
        config: Server configuration; defaults if not given.
        store: User store; a freshly seeded one if not given.
    """
    config = config or ServerConfig()
    users = UserHandlers(store if store is not None else UserStore())

    server = HTTPServer(config)

    # Logging first so rejected requests are still logged.
    server.use(LoggingMiddleware(log_format=config.log_format))
    server.use(AuthMiddleware(protected_prefixes=("/admin",)))
    server.use(CORSMiddleware())

    routes = server.routes
    routes.register(HTTPMethod.GET, "/", handle_home)
    routes.register(HTTPMethod.GET, "/api/hello", handle_hello)
    routes.register(HTTPMethod.GET, "/api/time", handle_time)
    routes.register(HTTPMethod.GET, "/api/users", users.list)
    routes.register(HTTPMethod.POST, "/api/users", users.create)
    routes.register(HTTPMethod.GET, "/api/users/:id", users.get)
    routes.register(HTTPMethod.DELETE, "/api/users/:id", users.delete)
    routes.register(HTTPMethod.GET, "/admin", handle_admin)

    return server
