"""
=============================================================================
HTTP SERVER
=============================================================================

Ties the transport (SocketServer, Connection, RequestParser) to the
dispatch core (Dispatcher).

=============================================================================
ARCHITECTURE OVERVIEW
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    HTTP SERVER ARCHITECTURE                         │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │                        ┌─────────────────┐                          │
    │                        │   HTTPServer    │                          │
    │                        └────────┬────────┘                          │
    │                                 │                                    │
    │            ┌────────────────────┼────────────────────┐              │
    │            ▼                    ▼                    ▼              │
    │    ┌──────────────┐    ┌──────────────┐    ┌──────────────────┐    │
    │    │ SocketServer │    │RequestParser │    │    Dispatcher    │    │
    │    │  (accept)    │    │ (bytes→Req)  │    │ middleware+routes│    │
    │    └──────┬───────┘    └──────────────┘    └──────────────────┘    │
    │           ▼                                                          │
    │    ┌──────────────┐                                                  │
    │    │  Connection  │                                                  │
    │    └──────────────┘                                                  │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

=============================================================================
REQUEST LIFECYCLE
=============================================================================

    1. SocketServer accepts a TCP connection
    2. Connection reads one request       (too large → 413, timeout → close)
    3. RequestParser builds a Request     (malformed → 400)
    4. Dispatcher.handle(request)         (never raises)
    5. Response.to_bytes() is sent
    6. Connection closes; the next accept() runs

=============================================================================
"""

from typing import Callable, Optional
import logging

from .config import ServerConfig
from .core import Connection, SocketServer
from .dispatcher import Dispatcher
from .http.request import HTTPParseError, RequestParser
from .http.response import Response, error_response
from .http.router import Handler, RouteTable
from .http.status_codes import status_text
from .middleware.base import Gate


logger = logging.getLogger(__name__)


class HTTPServer:
    """
    Sequential HTTP/1.1 server around a Dispatcher.

    =========================================================================
    USAGE
    =========================================================================

        server = HTTPServer(ServerConfig(port=8080))

        server.use(LoggingMiddleware())

        @server.get("/api/users/:id")
        def get_user(request, response):
            json_response(response, 200, {"id": request.path_params["id"]})

        server.run()   # blocks until Ctrl+C / SIGTERM

    =========================================================================
    """

    def __init__(self, config: Optional[ServerConfig] = None, dispatcher: Optional[Dispatcher] = None):
        """
        Args:
            config: Server configuration. Defaults if not provided.
            dispatcher: Dispatch core. A new empty Dispatcher if not provided.

        Raises:
            ValueError: Invalid configuration.
        """
        self.config = config or ServerConfig()
        self.config.validate()

        self._dispatcher = dispatcher or Dispatcher()
        self._parser = RequestParser(
            max_header_size=self.config.max_header_size,
            max_body_size=self.config.max_body_size,
        )
        # Shares self.config, so host/port overrides in run() reach it.
        self._socket_server = SocketServer(self.config)

    # =========================================================================
    # CONFIGURATION METHODS
    # =========================================================================

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    @property
    def routes(self) -> RouteTable:
        return self._dispatcher.routes

    def use(self, middleware: Gate) -> "HTTPServer":
        """
        Append a middleware gate.

        Gates run in the order added. Returns self for chaining:

            server.use(LoggingMiddleware()).use(AuthMiddleware())
        """
        self._dispatcher.use(middleware)
        return self

    def route(self, method: str, pattern: str) -> Callable[[Handler], Handler]:
        """Register a route handler for any method."""
        return self._dispatcher.route(method, pattern)

    def get(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a GET route."""
        return self._dispatcher.get(pattern)

    def post(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a POST route."""
        return self._dispatcher.post(pattern)

    def put(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a PUT route."""
        return self._dispatcher.put(pattern)

    def delete(self, pattern: str) -> Callable[[Handler], Handler]:
        """Register a DELETE route."""
        return self._dispatcher.delete(pattern)

    # =========================================================================
    # SERVER LIFECYCLE
    # =========================================================================

    @property
    def address(self):
        """Bound (host, port) once started; configured address before."""
        return self._socket_server.address

    def run(self, host: Optional[str] = None, port: Optional[int] = None):
        """
        Start the server (blocking).

        Args:
            host: Override config host.
            port: Override config port (0 picks a free port).
        """
        if host is not None:
            self.config.host = host
        if port is not None:
            self.config.port = port
        self.config.validate()

        self._setup_logging()

        logger.info(f"Starting HTTP server on {self.config.host}:{self.config.port}")
        logger.info(f"Registered routes:\n{self.routes.describe()}")

        try:
            self._socket_server.start(self._process_connection)
        except KeyboardInterrupt:
            logger.info("Received keyboard interrupt")
        finally:
            logger.info("Server stopped")

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until run() is listening. For tests and embedding."""
        return self._socket_server.wait_until_ready(timeout)

    def shutdown(self):
        """Stop accepting connections. The request in progress completes."""
        self._socket_server.shutdown()

    def _setup_logging(self):
        """Configure logging based on config."""
        level = getattr(logging, self.config.log_level.upper(), logging.INFO)

        logging.basicConfig(
            level=level,
            format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )
        logging.getLogger("minirouter").setLevel(level)

    # =========================================================================
    # REQUEST HANDLING
    # =========================================================================

    def _process_connection(self, conn: Connection):
        """
        Read, parse, dispatch and answer one request, then close.

        Runs on the accept-loop thread; the next client is accepted only
        after this returns.
        """
        with conn:
            try:
                raw_request = conn.read_request()
            except TimeoutError:
                logger.warning(f"[{conn.id}] Read timeout from {conn.client_ip}, closing")
                return
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Rejected request from {conn.client_ip}: {e}")
                self._send_error(conn, e.status_code)
                return

            if raw_request is None:
                logger.debug(f"[{conn.id}] Client closed without sending a request")
                return

            try:
                request = self._parser.parse(raw_request, conn.address)
            except HTTPParseError as e:
                logger.warning(f"[{conn.id}] Rejected request from {conn.client_ip}: {e}")
                self._send_error(conn, e.status_code)
                return

            response = self._dispatcher.handle(request)
            conn.send_response(response.to_bytes())

            logger.debug(
                f"[{conn.id}] {request.method} {request.path} -> {response.status_code}"
            )

    def _send_error(self, conn: Connection, status_code: int):
        """Answer a request that never reached the dispatcher."""
        response = error_response(Response(), status_code, status_text(status_code))
        conn.send_response(response.to_bytes())
