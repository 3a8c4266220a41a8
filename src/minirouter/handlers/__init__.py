"""
=============================================================================
HANDLERS
=============================================================================

Reference handlers for the demo application.

A handler takes (request, response), writes status, content type and body
onto the response, and returns nothing:

    def handle_admin(request, response):
        json_response(response, 200, {"message": "Welcome to admin panel"})

Path parameters captured by the route arrive in request.path_params:

    # GET /api/users/:id  with  /api/users/42
    request.path_params["id"]   # "42"

=============================================================================
"""

from .demo import handle_admin, handle_hello, handle_home, handle_not_found, handle_time
from .users import User, UserHandlers, UserStore

__all__ = [
    "handle_home",
    "handle_hello",
    "handle_time",
    "handle_admin",
    "handle_not_found",
    "User",
    "UserStore",
    "UserHandlers",
]
