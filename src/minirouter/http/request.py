"""
=============================================================================
HTTP REQUEST MODEL AND PARSER
=============================================================================

Turns raw request bytes into an immutable Request value for the dispatcher.

=============================================================================
WHAT THE DISPATCHER SEES
=============================================================================

    GET /api/hello?name=Alice HTTP/1.1\r\n
    Host: localhost:8080\r\n
    Authorization: Bearer xyz\r\n
    \r\n
         │
         ▼  RequestParser.parse()
    ┌────────────────────────────────────────────────────────────────────┐
    │  Request(                                                          │
    │      method=HTTPMethod.GET,                                        │
    │      path="/api/hello",              ← never contains "?"          │
    │      query={"name": "Alice"},        ← last value wins             │
    │      query_string="name=Alice",      ← raw, for access logs        │
    │      headers={"Host": "...",         ← names kept as received      │
    │               "Authorization": "Bearer xyz"},                      │
    │      body=b"",                       ← bounded by max_body_size    │
    │  )                                                                 │
    └────────────────────────────────────────────────────────────────────┘

=============================================================================
PARSING RULES
=============================================================================

1. REQUEST LINE: METHOD SP TARGET SP HTTP/x.y
   Unknown methods are NOT rejected here. They become
   HTTPMethod.UNSUPPORTED and simply never match a route (404).

2. TARGET: split at the first "?". Left side is the path, right side is
   parsed with parse_qsl. A repeated key keeps its LAST value.

3. HEADERS: "Name: value" lines up to the blank line. Names keep the
   case the client sent; lookups go through get_header(), which compares
   case-insensitively.

4. BODY: everything after the blank line, cut to Content-Length when the
   header is present. A body above max_body_size raises
   RequestTooLargeError (413). Nothing is silently truncated.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Optional, Tuple
from urllib.parse import parse_qsl
import re

from .status_codes import HTTPStatus


class HTTPMethod(Enum):
    """
    The closed set of methods the router understands.

    Anything else a client sends is folded into UNSUPPORTED at parse time,
    so routing code never has to deal with arbitrary strings.
    """

    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    UNSUPPORTED = "UNSUPPORTED"

    @classmethod
    def parse(cls, text: str) -> "HTTPMethod":
        """
        Map a request-line method token to an HTTPMethod.

        Matching is exact (HTTP methods are case-sensitive), so "get" is
        UNSUPPORTED just like "PATCH" or "".
        """
        try:
            return cls(text)
        except ValueError:
            return cls.UNSUPPORTED

    def __str__(self) -> str:
        return self.value


class HTTPParseError(Exception):
    """
    Raised when raw request bytes cannot be turned into a Request.

    Carries the HTTP status the transport should answer with:

        400 Bad Request       - Malformed request line, no header terminator
        413 Payload Too Large - Headers or body above the configured maxima
    """

    def __init__(self, message: str, status_code: int = HTTPStatus.BAD_REQUEST):
        super().__init__(message)
        self.status_code = status_code


class RequestTooLargeError(HTTPParseError):
    """Request headers or body exceed the configured size limits."""

    def __init__(self, message: str):
        super().__init__(message, status_code=HTTPStatus.PAYLOAD_TOO_LARGE)


@dataclass(frozen=True)
class Request:
    """
    A parsed HTTP request.

    Frozen: once the parser builds it, nothing in the dispatch path can
    change it. The dispatcher hands handlers a copy carrying path_params
    (made with dataclasses.replace) rather than mutating this value.

    Attributes:
        method:         HTTPMethod member
        path:           Request path without the query component
        query:          Query parameters, last-write-wins, values uncoerced
        query_string:   The query component exactly as received, without "?"
        headers:        Header name → value, names exactly as received
        body:           Raw body bytes
        path_params:    Parameter captured by the matched route, e.g. {"id": "42"}
        client_address: (ip, port) of the client, for logging
    """

    method: HTTPMethod
    path: str
    query: Dict[str, str] = field(default_factory=dict)
    query_string: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    body: bytes = b""
    path_params: Dict[str, str] = field(default_factory=dict)
    client_address: Tuple[str, int] = ("", 0)

    def __post_init__(self):
        if "?" in self.path:
            raise ValueError(f"Request path must not contain '?': {self.path!r}")

    @classmethod
    def from_target(
        cls,
        method: str,
        target: str,
        headers: Optional[Dict[str, str]] = None,
        body: bytes = b"",
        client_address: Tuple[str, int] = ("", 0),
    ) -> "Request":
        """
        Build a Request from a raw method token and request target.

        The target is split at the first "?":

            "/api/hello?name=Alice"  →  path="/api/hello", query={"name": "Alice"},
                                    query_string="name=Alice"

        Example:
            request = Request.from_target("GET", "/api/users/42")
        """
        path, _, query_string = target.partition("?")
        return cls(
            method=HTTPMethod.parse(method),
            path=path or "/",
            query=parse_query(query_string),
            query_string=query_string,
            headers=dict(headers or {}),
            body=body,
            client_address=client_address,
        )

    # =========================================================================
    # ACCESSORS
    # =========================================================================

    def get_header(self, name: str, default: str = "") -> str:
        """
        Get a header value, comparing names case-insensitively.

        Header names are stored exactly as the client sent them, so
        "authorization", "Authorization" and "AUTHORIZATION" must all be
        found by get_header("Authorization").
        """
        wanted = name.lower()
        for header_name, value in self.headers.items():
            if header_name.lower() == wanted:
                return value
        return default

    def has_header(self, name: str) -> bool:
        """Check whether a header is present (case-insensitive)."""
        wanted = name.lower()
        return any(header_name.lower() == wanted for header_name in self.headers)

    def get_query(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get a query parameter value.

        Example:
            # URL: /api/hello?name=Alice
            request.get_query("name", "Guest")  # "Alice"
        """
        return self.query.get(name, default)

    @property
    def content_type(self) -> str:
        """Content-Type without parameters, lower-cased ("" if absent)."""
        return self.get_header("Content-Type").split(";")[0].strip().lower()

    @property
    def text(self) -> str:
        """The body decoded as UTF-8 (undecodable bytes replaced)."""
        return self.body.decode("utf-8", errors="replace")

    @property
    def form(self) -> Dict[str, str]:
        """
        Fields of an application/x-www-form-urlencoded body.

        Returns an empty dict for any other content type.
        """
        if self.content_type != "application/x-www-form-urlencoded":
            return {}
        return parse_query(self.text)


def parse_query(query_string: str) -> Dict[str, str]:
    """
    Parse a query string into a flat dict.

    Repeated keys keep the last value (dict() over parse_qsl pairs):

        parse_query("a=1&a=2&b=3")  # {"a": "2", "b": "3"}
    """
    return dict(parse_qsl(query_string, keep_blank_values=True))


class RequestParser:
    """
    Parses raw HTTP request bytes into Request values.

    ==========================================================================
    PARSER PIPELINE
    ==========================================================================

        Raw bytes
            │
            ├── 1. Find "\r\n\r\n"          missing   → HTTPParseError(400)
            ├── 2. Header section size      too big   → RequestTooLargeError
            ├── 3. Request line             malformed → HTTPParseError(400)
            ├── 4. Header lines             "Name: value"
            ├── 5. Body via Content-Length  too big   → RequestTooLargeError
            │                               short     → HTTPParseError(400)
            ▼
        Request

    ==========================================================================
    """

    # METHOD SP TARGET SP HTTP/x.y
    # Any method token is accepted; HTTPMethod.parse folds unknown ones.
    REQUEST_LINE_PATTERN = re.compile(r"^(\S+) (\S+) (HTTP/\d\.\d)$")
    HEADER_PATTERN = re.compile(r"^([^:\s][^:]*):\s*(.*)$")

    def __init__(self, max_header_size: int = 8192, max_body_size: int = 64 * 1024):
        """
        Args:
            max_header_size: Maximum size of the request line plus headers.
            max_body_size: Maximum body size in bytes.
        """
        self.max_header_size = max_header_size
        self.max_body_size = max_body_size

    def parse(
        self,
        data: bytes,
        client_address: Tuple[str, int] = ("", 0),
    ) -> Request:
        """
        Parse raw request bytes.

        Args:
            data: Complete request bytes as read from the socket.
            client_address: Client (ip, port), kept on the Request for logs.

        Returns:
            The parsed Request.

        Raises:
            HTTPParseError: Malformed request.
            RequestTooLargeError: Header section or body above the limits.
        """
        header_end = data.find(b"\r\n\r\n")
        if header_end == -1:
            if len(data) > self.max_header_size:
                raise RequestTooLargeError(f"Header section exceeds {self.max_header_size} bytes")
            raise HTTPParseError("Incomplete request: no header terminator")

        if header_end > self.max_header_size:
            raise RequestTooLargeError(f"Header section exceeds {self.max_header_size} bytes")

        header_section = data[:header_end].decode("iso-8859-1")
        body = data[header_end + 4:]

        lines = header_section.split("\r\n")
        method, target = self._parse_request_line(lines[0])
        headers = self._parse_headers(lines[1:])
        body = self._extract_body(headers, body)

        return Request.from_target(
            method,
            target,
            headers=headers,
            body=body,
            client_address=client_address,
        )

    def _parse_request_line(self, line: str) -> Tuple[str, str]:
        """Split "GET /path?q HTTP/1.1" into ("GET", "/path?q")."""
        match = self.REQUEST_LINE_PATTERN.match(line)
        if not match:
            raise HTTPParseError(f"Invalid request line: {line!r}")

        method, target, _version = match.groups()
        if not target.startswith("/"):
            raise HTTPParseError(f"Invalid request target: {target!r}")
        return method, target

    def _parse_headers(self, lines: list) -> Dict[str, str]:
        """
        Parse "Name: value" lines.

        Names keep their original case. A repeated header keeps the last
        value; malformed lines are skipped.
        """
        headers: Dict[str, str] = {}
        for line in lines:
            match = self.HEADER_PATTERN.match(line)
            if not match:
                continue
            name, value = match.groups()
            headers[name.strip()] = value.strip()
        return headers

    def _extract_body(self, headers: Dict[str, str], body: bytes) -> bytes:
        content_length = None
        for name, value in headers.items():
            if name.lower() == "content-length":
                try:
                    content_length = int(value)
                except ValueError:
                    raise HTTPParseError(f"Invalid Content-Length: {value!r}")
                if content_length < 0:
                    raise HTTPParseError(f"Invalid Content-Length: {value!r}")

        declared = content_length if content_length is not None else len(body)
        if declared > self.max_body_size:
            raise RequestTooLargeError(
                f"Request body of {declared} bytes exceeds {self.max_body_size} bytes"
            )

        if content_length is None:
            return body
        if len(body) < content_length:
            raise HTTPParseError(
                f"Incomplete body: expected {content_length} bytes, got {len(body)}"
            )
        return body[:content_length]


def parse_request(
    data: bytes,
    client_address: Tuple[str, int] = ("", 0),
    max_body_size: int = 64 * 1024,
) -> Request:
    """
    Convenience function: parse with a one-off RequestParser.

    Use RequestParser directly when parsing many requests with the same limits.
    """
    parser = RequestParser(max_body_size=max_body_size)
    return parser.parse(data, client_address)
