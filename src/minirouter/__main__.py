"""
=============================================================================
MINIROUTER CLI ENTRY POINT
=============================================================================

    python -m minirouter                        # localhost:8080
    python -m minirouter --port 3000
    python -m minirouter --host 0.0.0.0         # all interfaces
    python -m minirouter --log-format json      # JSON access log

Settings are resolved as: command-line flag, then MINIROUTER_* environment
variable, then the ServerConfig default.

=============================================================================
"""

from typing import List, Optional
import argparse
import sys

from . import __version__
from .app import create_app
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="minirouter",
        description="Minimal HTTP router with an ordered middleware chain",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m minirouter                      # Run with defaults
  python -m minirouter --port 3000          # Custom port
  python -m minirouter --host 0.0.0.0       # Listen on all interfaces
  python -m minirouter --log-level DEBUG    # Verbose logging
        """
    )

    # Flags default to None so unset flags leave env/config values alone.
    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )
    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)"
    )
    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )
    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"minirouter {__version__}"
    )
    return parser


def config_from_args(args: argparse.Namespace) -> ServerConfig:
    """Environment configuration with command-line overrides applied."""
    config = ServerConfig.from_env()
    if args.host is not None:
        config.host = args.host
    if args.port is not None:
        config.port = args.port
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format
    config.validate()
    return config


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as e:
        parser.error(str(e))

    server = create_app(config)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
