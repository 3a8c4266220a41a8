"""
=============================================================================
CONNECTION HANDLING
=============================================================================

Wraps one accepted client socket: read exactly one HTTP request, send one
response, close.

=============================================================================
TCP IS A BYTE STREAM, NOT A MESSAGE PROTOCOL
=============================================================================

TCP does NOT preserve message boundaries. A request sent in one write can
arrive in several recv() chunks:

    Client sends:
        GET /api/users HTTP/1.1\r\nHost: localhost\r\n\r\n

    Server might receive:
        First recv():  "GET /api/use"
        Second recv(): "rs HTTP/1.1\r\nHost: localhost\r\n\r\n"

So reading buffers until the header terminator (\r\n\r\n) shows up, then
keeps reading until Content-Length body bytes are in.

=============================================================================
LIMITS
=============================================================================

Reading stops early, with RequestTooLargeError, as soon as either limit is
known to be exceeded:

    header section > max_header_size       (no terminator in sight)
    Content-Length  > max_body_size         (declared, before reading it)
    buffered body   > max_body_size         (no Content-Length)

The server answers those with 413 instead of buffering without bound.

=============================================================================
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple
import logging
import socket
import time
import uuid

from ..http.request import RequestTooLargeError


logger = logging.getLogger(__name__)


class ConnectionState(Enum):
    """Connection lifecycle states, for logging."""

    NEW = "new"
    READING = "reading"
    WRITING = "writing"
    CLOSED = "closed"


@dataclass
class Connection:
    """
    One client connection.

    Every response carries "Connection: close", so a Connection serves a
    single request and is then closed.

    Attributes:
        socket: The client socket.
        address: Client's (ip, port) tuple.
        id: Short identifier for log lines.
        state: Current connection state.
        created_at: Timestamp when the connection was accepted.
    """

    socket: socket.socket
    address: Tuple[str, int]

    id: str = field(default_factory=lambda: str(uuid.uuid4())[:8])
    state: ConnectionState = ConnectionState.NEW
    created_at: float = field(default_factory=time.time)

    # Configuration (passed from ServerConfig)
    buffer_size: int = 4096
    timeout: Optional[float] = 30.0
    max_header_size: int = 8192
    max_body_size: int = 64 * 1024

    _buffer: bytes = field(default=b"", repr=False)

    def __post_init__(self):
        self.socket.setblocking(True)
        if self.timeout:
            self.socket.settimeout(self.timeout)

    @property
    def client_ip(self) -> str:
        return self.address[0]

    @property
    def age(self) -> float:
        """Connection age in seconds."""
        return time.time() - self.created_at

    # =========================================================================
    # READING
    # =========================================================================

    def read_request(self) -> Optional[bytes]:
        """
        Read one complete HTTP request from the socket.

        ┌─────────────────────────────────────────────────────────────────┐
        │                    read_request() Flow                          │
        ├─────────────────────────────────────────────────────────────────┤
        │                                                                  │
        │   while no \r\n\r\n:        recv() → buffer                     │
        │                             buffer > max_header_size → 413      │
        │                                                                  │
        │   Content-Length?           > max_body_size → 413               │
        │   no Content-Length:        buffered body > max → 413           │
        │                                                                  │
        │   while body incomplete:    recv() → buffer                     │
        │                                                                  │
        │   return header + body                                           │
        │                                                                  │
        └─────────────────────────────────────────────────────────────────┘

        Returns:
            The request bytes, or None if the client closed before sending
            anything. A client that closes mid-body yields what was read;
            the parser reports the short body as 400. Without a
            Content-Length header the body is whatever arrived along with
            the headers.

        Raises:
            TimeoutError: The client stopped sending.
            RequestTooLargeError: Header section or body too large.
        """
        self.state = ConnectionState.READING

        try:
            while b"\r\n\r\n" not in self._buffer:
                chunk = self._recv()
                if not chunk:
                    return self._buffer or None
                self._buffer += chunk
                if len(self._buffer) > self.max_header_size and b"\r\n\r\n" not in self._buffer:
                    raise RequestTooLargeError(
                        f"Header section exceeds {self.max_header_size} bytes"
                    )

            header_end = self._buffer.find(b"\r\n\r\n")
            body_start = header_end + 4

            content_length = self._parse_content_length(self._buffer[:header_end])
            if content_length is None:
                content_length = len(self._buffer) - body_start

            if content_length > self.max_body_size:
                raise RequestTooLargeError(
                    f"Request body of {content_length} bytes exceeds {self.max_body_size} bytes"
                )

            while len(self._buffer) - body_start < content_length:
                chunk = self._recv()
                if not chunk:
                    break
                self._buffer += chunk

            request_data = self._buffer[:body_start + content_length]
            self._buffer = b""
            return request_data

        except socket.timeout:
            raise TimeoutError("Request read timeout")

    def _recv(self) -> bytes:
        """socket.recv() returning b"" when the client disconnected abruptly."""
        try:
            return self.socket.recv(self.buffer_size)
        except (ConnectionResetError, BrokenPipeError):
            return b""

    def _parse_content_length(self, headers: bytes) -> Optional[int]:
        """
        Content-Length from raw header bytes, or None when absent.

        A malformed or negative value also reads as None here; the parser
        rejects it with 400 once the request is complete.
        """
        header_str = headers.decode("iso-8859-1").lower()
        for line in header_str.split("\r\n"):
            if line.startswith("content-length:"):
                try:
                    value = int(line.split(":", 1)[1].strip())
                except ValueError:
                    return None
                return value if value >= 0 else None
        return None

    # =========================================================================
    # WRITING
    # =========================================================================

    def send_response(self, data: bytes) -> bool:
        """
        Send response bytes with sendall().

        Returns:
            True if the send succeeded, False if the client went away.
        """
        self.state = ConnectionState.WRITING
        try:
            self.socket.sendall(data)
            return True
        except OSError as e:
            logger.warning(f"[{self.id}] Send failed: {e}")
            return False

    # =========================================================================
    # CLOSING
    # =========================================================================

    def close(self):
        """
        Close the connection: shutdown(SHUT_WR) so the client sees EOF after
        the response, then release the descriptor.
        """
        if self.state == ConnectionState.CLOSED:
            return

        try:
            self.socket.shutdown(socket.SHUT_WR)
        except OSError:
            pass  # already disconnected

        try:
            self.socket.close()
        except OSError:
            pass

        self.state = ConnectionState.CLOSED
        logger.debug(f"[{self.id}] Connection closed after {self.age:.3f}s")

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False
