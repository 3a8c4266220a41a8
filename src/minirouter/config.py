"""
=============================================================================
SERVER CONFIGURATION
=============================================================================

All runtime options of the server in one dataclass.

=============================================================================
CONFIGURATION SOURCES
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │                    CONFIGURATION HIERARCHY                          │
    ├─────────────────────────────────────────────────────────────────────┤
    │                                                                      │
    │   Priority (highest to lowest):                                     │
    │                                                                      │
    │   1. Command-line arguments                                         │
    │      └── python -m minirouter --port 3000                          │
    │                                                                      │
    │   2. Environment variables                                          │
    │      └── MINIROUTER_PORT=3000 python -m minirouter                 │
    │                                                                      │
    │   3. Default values (in this dataclass)                            │
    │                                                                      │
    └─────────────────────────────────────────────────────────────────────┘

Validation runs once at startup. A bad value stops the server before it
binds a socket, not on the first request.

=============================================================================
"""

import os
from dataclasses import dataclass
from typing import Optional


LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
LOG_FORMATS = ("text", "json")


@dataclass
class ServerConfig:
    """
    Configuration for the HTTP server.

    =========================================================================
    CONFIGURATION GROUPS
    =========================================================================

    NETWORK SETTINGS
    - host, port, backlog, buffer_size, timeout

    REQUEST LIMITS
    - max_header_size, max_body_size

    LOGGING
    - log_level, log_format

    =========================================================================
    """

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK SETTINGS
    # ─────────────────────────────────────────────────────────────────────

    host: str = "127.0.0.1"
    """
    The IP address to bind to.
    - "127.0.0.1" - Localhost only (development)
    - "0.0.0.0" - All network interfaces
    """

    port: int = 8080
    """Port to listen on. 0 lets the OS pick a free port (used by tests)."""

    backlog: int = 10
    """Maximum number of queued connections waiting for accept()."""

    buffer_size: int = 4096
    """Bytes requested per recv() call."""

    timeout: Optional[float] = 30.0
    """
    Per-connection read timeout in seconds.
    A client that stops sending is dropped after this long.
    """

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST LIMITS
    # ─────────────────────────────────────────────────────────────────────

    max_header_size: int = 8192
    """Maximum size of request line plus headers, in bytes."""

    max_body_size: int = 64 * 1024
    """
    Maximum request body size in bytes.
    Larger bodies are answered with 413, never truncated.
    """

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    log_level: str = "INFO"
    """Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)."""

    log_format: str = "text"
    """Access log format: 'text' or 'json'."""

    @classmethod
    def from_env(cls) -> "ServerConfig":
        """
        Create configuration from environment variables.

        =====================================================================
        ENVIRONMENT VARIABLES
        =====================================================================

        MINIROUTER_HOST           Server host (default: 127.0.0.1)
        MINIROUTER_PORT           Server port (default: 8080)
        MINIROUTER_TIMEOUT        Read timeout in seconds (default: 30)
        MINIROUTER_MAX_BODY_SIZE  Body limit in bytes (default: 65536)
        MINIROUTER_LOG_LEVEL      Logging level (default: INFO)
        MINIROUTER_LOG_FORMAT     Access log format (default: text)

        =====================================================================

        Raises:
            ValueError: A numeric variable does not parse.
        """
        defaults = cls()
        return cls(
            host=os.getenv("MINIROUTER_HOST", defaults.host),
            port=int(os.getenv("MINIROUTER_PORT", str(defaults.port))),
            timeout=float(os.getenv("MINIROUTER_TIMEOUT", str(defaults.timeout))),
            max_body_size=int(os.getenv("MINIROUTER_MAX_BODY_SIZE", str(defaults.max_body_size))),
            log_level=os.getenv("MINIROUTER_LOG_LEVEL", defaults.log_level).upper(),
            log_format=os.getenv("MINIROUTER_LOG_FORMAT", defaults.log_format).lower(),
        )

    def validate(self) -> None:
        """
        Validate configuration values.

        Raises:
            ValueError: The first invalid value found.
        """
        if not 0 <= self.port <= 65535:
            raise ValueError(f"Invalid port: {self.port}. Must be 0-65535.")

        if self.backlog < 1:
            raise ValueError("backlog must be >= 1")

        if self.buffer_size < 1:
            raise ValueError("buffer_size must be >= 1")

        if self.timeout is not None and self.timeout <= 0:
            raise ValueError("timeout must be > 0")

        if self.max_header_size < 1:
            raise ValueError("max_header_size must be >= 1")

        if self.max_body_size < 0:
            raise ValueError("max_body_size must be >= 0")

        if self.log_level.upper() not in LOG_LEVELS:
            raise ValueError(f"Unknown log level: {self.log_level!r}")

        if self.log_format not in LOG_FORMATS:
            raise ValueError(f"Unknown log format: {self.log_format!r}")
