"""
Stateless demo handlers: home page, greeting, server time, admin page.

Each one fills in the response it is given and returns nothing.
"""

import time

from ..http.request import Request
from ..http.response import Response, json_response
from ..http.router import handle_not_found
from ..http.status_codes import HTTPStatus


HOME_PAGE = (
    "<!DOCTYPE html>"
    "<html><head><title>minirouter</title></head>"
    "<body>"
    "<h1>Welcome to minirouter!</h1>"
    "<p>Available endpoints:</p>"
    "<ul>"
    "<li>GET / - This page</li>"
    "<li>GET /api/hello?name=Alice - Greeting</li>"
    "<li>GET /api/time - Current time</li>"
    "<li>GET /api/users - List users</li>"
    "<li>POST /api/users - Create user</li>"
    "<li>GET /api/users/1 - Get specific user</li>"
    "<li>DELETE /api/users/1 - Delete user</li>"
    "<li>GET /admin - Protected route (requires Authorization)</li>"
    "</ul>"
    "</body></html>"
)


def handle_home(request: Request, response: Response) -> None:
    """HTML page listing the endpoints."""
    response.set_html(HTTPStatus.OK, HOME_PAGE)


def handle_hello(request: Request, response: Response) -> None:
    """
    Greeting with an optional name.

        GET /api/hello?name=Alice  →  {"message": "Hello, Alice!", "timestamp": 1760000000}
        GET /api/hello             →  {"message": "Hello, Guest!", ...}
    """
    name = request.get_query("name", "Guest")
    json_response(response, HTTPStatus.OK, {
        "message": f"Hello, {name}!",
        "timestamp": int(time.time()),
    })


def handle_time(request: Request, response: Response) -> None:
    now = time.time()
    json_response(response, HTTPStatus.OK, {
        "current_time": time.ctime(now),
        "unix_timestamp": int(now),
    })


def handle_admin(request: Request, response: Response) -> None:
    # Reached only through AuthMiddleware.
    json_response(response, HTTPStatus.OK, {"message": "Welcome to admin panel"})


__all__ = [
    "HOME_PAGE",
    "handle_home",
    "handle_hello",
    "handle_time",
    "handle_admin",
    "handle_not_found",
]
