"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Run with defaults (127.0.0.1:4221, no files directory)
    python -m tinyhttpd

    # Serve and accept uploads under /tmp/data
    python -m tinyhttpd --directory /tmp/data

    # Same thing via the console script
    tinyhttpd --directory /tmp/data --log-level DEBUG

Command-line flags override HTTP_* environment variables, which override
the ServerConfig defaults.

=============================================================================
"""

import argparse
import sys
from dataclasses import replace
from typing import List, Optional

from . import __version__
from .config import ServerConfig
from .server import HTTPServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Build the argument parser, seeding defaults from `defaults`."""
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal HTTP/1.1 server: echo, user-agent and file routes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tinyhttpd                            # 127.0.0.1:4221
  python -m tinyhttpd --directory /tmp/data      # enable /files/<name>
  python -m tinyhttpd --port 0 --log-level DEBUG # any free port, verbose
        """,
    )

    parser.add_argument(
        "--directory", "-d",
        default=defaults.files_root,
        help="Directory backing /files/<name> (default: none, /files answers 500)",
    )

    parser.add_argument(
        "--host", "-H",
        default=defaults.host,
        help=f"Host to bind to (default: {defaults.host})",
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=defaults.port,
        help=f"Port to listen on (default: {defaults.port})",
    )

    parser.add_argument(
        "--timeout", "-t",
        type=float,
        default=defaults.timeout,
        help="Per-connection socket timeout in seconds (default: none)",
    )

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level.upper()})",
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}",
    )

    return parser


def parse_config(argv: Optional[List[str]] = None) -> ServerConfig:
    """
    Turn environment + command line into a validated ServerConfig.

    Exits via argparse (status 2) on bad arguments or invalid config.
    """
    try:
        defaults = ServerConfig.from_env()
    except ValueError as e:
        print(f"Error: invalid HTTP_* environment variable: {e}", file=sys.stderr)
        sys.exit(2)

    parser = build_parser(defaults)
    args = parser.parse_args(argv)

    config = replace(
        defaults,
        host=args.host,
        port=args.port,
        timeout=args.timeout,
        files_root=args.directory,
        log_level=args.log_level,
    )

    try:
        config.validate()
    except ValueError as e:
        parser.error(str(e))

    return config


def main(argv: Optional[List[str]] = None) -> int:
    """Console script entry point. Blocks until the server stops."""
    config = parse_config(argv)
    server = HTTPServer(config)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
