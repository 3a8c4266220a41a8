"""
=============================================================================
HTTP RESPONSE MODEL
=============================================================================

The value handlers and middleware write into, and the rule that turns it
into bytes for the socket.

=============================================================================
RESPONSE LIFECYCLE
=============================================================================

    Dispatcher            Middleware / Handler          Transport
    creates defaults ───► mutate in place       ───►    to_bytes()
        │                       │                          │
    Response(               response.set_json(         b"HTTP/1.1 201 Created\r\n
      status_code=200,        201,                       Content-Type: application/json\r\n
      content_type=           '{"created": true}'        Content-Length: 17\r\n
        "text/plain",       )                            Connection: close\r\n
      body="",                                           \r\n
    )                                                    {"created": true}"

=============================================================================
WIRE SHAPE
=============================================================================

Every response has exactly this head, in this order, followed by any
extra headers a middleware added:

    HTTP/1.1 <status_code> <status_text>
    Content-Type: <content_type>
    Content-Length: <byte length of body>
    Connection: close

Content-Length always counts BYTES of the UTF-8 encoded body, not
characters. "héllo" is 6 bytes, not 5.

=============================================================================
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Union
import json

from .status_codes import status_text


@dataclass
class Response:
    """
    An HTTP response under construction.

    Defaults are 200 / text/plain / empty body until a middleware or handler
    overwrites them. Setters return self so they chain:

        response.set_json(200, body).set_header("X-Trace", "abc")
    """

    status_code: int = 200
    content_type: str = "text/plain"
    body: Union[str, bytes] = ""
    headers: Dict[str, str] = field(default_factory=dict)

    # =========================================================================
    # SETTERS
    # =========================================================================

    def set_json(self, status_code: int, body: Union[str, bytes]) -> "Response":
        """Set status and a JSON body that is already serialized."""
        self.status_code = status_code
        self.content_type = "application/json"
        self.body = body
        return self

    def set_text(self, status_code: int, body: str) -> "Response":
        """Set status and a plain text body."""
        self.status_code = status_code
        self.content_type = "text/plain"
        self.body = body
        return self

    def set_html(self, status_code: int, body: str) -> "Response":
        """Set status and an HTML body."""
        self.status_code = status_code
        self.content_type = "text/html"
        self.body = body
        return self

    def set_header(self, name: str, value: str) -> "Response":
        """
        Add an extra header.

        Content-Type, Content-Length and Connection are owned by the
        serializer; setting them here has no effect on the wire.
        """
        self.headers[name] = value
        return self

    # =========================================================================
    # SERIALIZATION
    # =========================================================================

    @property
    def body_bytes(self) -> bytes:
        """The body as bytes (str bodies are UTF-8 encoded)."""
        if isinstance(self.body, bytes):
            return self.body
        return self.body.encode("utf-8")

    @property
    def status_text(self) -> str:
        """Reason phrase for status_code ("Unknown" for unmapped codes)."""
        return status_text(self.status_code)

    @property
    def status_line(self) -> str:
        """Example: "HTTP/1.1 404 Not Found"."""
        return f"HTTP/1.1 {self.status_code} {self.status_text}"

    def to_bytes(self) -> bytes:
        """
        Serialize the response for socket.sendall().

        =====================================================================
        SERIALIZATION FORMAT
        =====================================================================

            HTTP/1.1 200 OK\r\n              ← status line
            Content-Type: text/plain\r\n
            Content-Length: 5\r\n            ← computed from body bytes
            Connection: close\r\n            ← always; one request per connection
            X-Extra: value\r\n               ← extra headers, if any
            \r\n                             ← blank line
            hello                            ← body

        =====================================================================
        """
        body = self.body_bytes
        lines = [
            self.status_line,
            f"Content-Type: {self.content_type}",
            f"Content-Length: {len(body)}",
            "Connection: close",
        ]
        for name, value in self.headers.items():
            if name.lower() in _RESERVED_HEADERS:
                continue
            lines.append(f"{name}: {value}")

        head = "\r\n".join(lines) + "\r\n\r\n"
        return head.encode("utf-8") + body


_RESERVED_HEADERS = {"content-type", "content-length", "connection"}


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================
#
# Handlers assemble JSON bodies as literal strings via json.dumps and write
# them with these one-liners:
#
#     json_response(response, 404, {"error": "User not found"})
#     error_response(response, 401, "Unauthorized")
#
# =============================================================================

def json_response(response: Response, status_code: int, data: Any) -> Response:
    """
    Serialize data with json.dumps and store it on the response.

    Args:
        response: The response to mutate.
        status_code: Status to set.
        data: Any JSON-serializable value.

    Returns:
        The same response, for chaining.
    """
    return response.set_json(status_code, json.dumps(data))


def error_response(response: Response, status_code: int, message: str) -> Response:
    """Write the canonical error body {"error": message}."""
    return json_response(response, status_code, {"error": message})
