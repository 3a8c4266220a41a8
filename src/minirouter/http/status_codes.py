"""
=============================================================================
HTTP STATUS CODES
=============================================================================

The closed set of status codes the dispatch core and the transport ever
produce, with their reason phrases.

=============================================================================
STATUS CODES IN USE
=============================================================================

    ┌────────┬───────────────────────────┬──────────────────────────────────┐
    │  Code  │  Reason phrase            │  Produced by                     │
    ├────────┼───────────────────────────┼──────────────────────────────────┤
    │  200   │  OK                       │  Response default, most handlers │
    │  201   │  Created                  │  POST /api/users                 │
    │  204   │  No Content               │  Handlers with nothing to return │
    │  400   │  Bad Request              │  Malformed request line          │
    │  401   │  Unauthorized             │  AuthMiddleware                  │
    │  404   │  Not Found                │  Not-found handler               │
    │  405   │  Method Not Allowed       │  Dispatcher (opt-in mode)        │
    │  413   │  Payload Too Large        │  Oversized headers or body       │
    │  500   │  Internal Server Error    │  Handler raised                  │
    └────────┴───────────────────────────┴──────────────────────────────────┘

Anything else a handler writes into Response.status_code is still sent,
but with the reason phrase "Unknown".

=============================================================================
"""

from enum import IntEnum


class HTTPStatus(IntEnum):
    """
    HTTP status codes known to the server.

    IntEnum, so members compare equal to plain integers:

        >>> HTTPStatus.OK == 200
        True
        >>> HTTPStatus.NOT_FOUND.phrase
        'Not Found'
    """

    OK = 200                        # Standard success response
    CREATED = 201                   # New resource was created (POST)
    NO_CONTENT = 204                # Success but no body to return

    BAD_REQUEST = 400               # Malformed request syntax
    UNAUTHORIZED = 401              # Authentication required
    NOT_FOUND = 404                 # No route matched
    METHOD_NOT_ALLOWED = 405        # Path exists, method does not
    PAYLOAD_TOO_LARGE = 413         # Request above configured limits

    INTERNAL_SERVER_ERROR = 500     # Handler failure

    @property
    def phrase(self) -> str:
        """
        Get the reason phrase for this status code.

            HTTP/1.1 404 Not Found
                     ─── ─────────
                      │      │
                      │      └── Reason phrase
                      └───────── Status code
        """
        return _STATUS_PHRASES.get(self, "Unknown")

    @property
    def is_error(self) -> bool:
        """Check if this is an error status code (4xx or 5xx)."""
        return self >= 400


_STATUS_PHRASES = {
    HTTPStatus.OK: "OK",
    HTTPStatus.CREATED: "Created",
    HTTPStatus.NO_CONTENT: "No Content",
    HTTPStatus.BAD_REQUEST: "Bad Request",
    HTTPStatus.UNAUTHORIZED: "Unauthorized",
    HTTPStatus.NOT_FOUND: "Not Found",
    HTTPStatus.METHOD_NOT_ALLOWED: "Method Not Allowed",
    HTTPStatus.PAYLOAD_TOO_LARGE: "Payload Too Large",
    HTTPStatus.INTERNAL_SERVER_ERROR: "Internal Server Error",
}


def status_text(code: int) -> str:
    """
    Get the reason phrase for an arbitrary integer status code.

    Handlers are free to write any integer into Response.status_code, so the
    lookup has to tolerate codes outside HTTPStatus.

    Example:
        status_text(201)  # "Created"
        status_text(418)  # "Unknown"
    """
    try:
        return HTTPStatus(code).phrase
    except ValueError:
        return "Unknown"
