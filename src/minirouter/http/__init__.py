"""
=============================================================================
HTTP PROTOCOL COMPONENTS
=============================================================================

    request.py       Request model, HTTPMethod, RequestParser, parse errors
    response.py      Response model and its wire serialization
    matcher.py       Pattern → path matching, parameter extraction
    router.py        RouteTable (ordered, first match wins)
    status_codes.py  HTTPStatus and reason phrases

=============================================================================
"""

from .request import (
    HTTPMethod,
    HTTPParseError,
    Request,
    RequestParser,
    RequestTooLargeError,
    parse_query,
    parse_request,
)
from .response import Response, error_response, json_response
from .matcher import extract_param, matches
from .router import Handler, Route, RouteMatch, RouteTable, handle_not_found
from .status_codes import HTTPStatus, status_text

__all__ = [
    # Requests
    "HTTPMethod",
    "HTTPParseError",
    "Request",
    "RequestParser",
    "RequestTooLargeError",
    "parse_query",
    "parse_request",

    # Responses
    "Response",
    "error_response",
    "json_response",

    # Matching and routing
    "extract_param",
    "matches",
    "Handler",
    "Route",
    "RouteMatch",
    "RouteTable",
    "handle_not_found",

    # Status codes
    "HTTPStatus",
    "status_text",
]
