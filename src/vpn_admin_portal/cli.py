"""
CLI entry point for the VPN Admin Portal.

PURPOSE: Command-line interface for running the portal web server.
AI CONTEXT: Main entry point for package execution.

USAGE:
    # Serve the portal (default)
    python -m vpn_admin_portal

    # Or via CLI command (after install)
    vpn-admin-portal
    vpn-admin-portal serve --host 0.0.0.0 --port 8080
"""

from __future__ import annotations

import argparse
import logging
import sys
from functools import lru_cache

# Constants
PROG_NAME = "vpn-admin-portal"
DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 8000


@lru_cache(maxsize=1)
def _get_logger() -> logging.Logger:
    """Get module logger (cached for thread safety)."""
    logging.basicConfig(level=logging.INFO)
    return logging.getLogger(__name__)


def run_serve(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT) -> None:
    """
    Serve the portal over HTTP.

    Business context: Administrators reach the portal through a reverse
    proxy that terminates TLS; the portal itself speaks plain HTTP on a
    local port.

    Args:
        host: Network interface to bind to. Default '127.0.0.1'.
        port: TCP port for the HTTP server. Default 8000.

    Returns:
        None. Blocks until server shutdown (Ctrl+C).

    Raises:
        OSError: If port is already in use.

    Example:
        >>> # From command line:
        >>> # vpn-admin-portal serve --port 8080
        >>> run_serve(port=8080)
    """
    from .web import run_portal

    logger = _get_logger()
    logger.info("Starting VPN Admin Portal at http://%s:%d", host, port)
    logger.info("Press Ctrl+C to stop")
    run_portal(host=host, port=port)


def main() -> int:
    """
    Main CLI entry point for the VPN Admin Portal.

    Parses command-line arguments and dispatches to the subcommand
    handler. Without a subcommand the portal is served on the default
    address.

    Subcommands:
    - serve [--host HOST] [--port PORT]: Run the web server (default)

    Returns:
        Exit code 0 for success.

    Raises:
        SystemExit: On --help, --version or argument parsing errors.

    Example:
        >>> # From command line:
        >>> # vpn-admin-portal serve --port 8080
        >>> sys.exit(main())
    """
    from .__version__ import __version__

    parser = argparse.ArgumentParser(
        prog=PROG_NAME,
        description="VPN Admin Portal - administration web interface for a VPN service",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the portal web server",
    )
    serve_parser.add_argument(
        "--host",
        default=DEFAULT_HOST,
        help=f"Bind address (default: {DEFAULT_HOST})",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=DEFAULT_PORT,
        help=f"Port number (default: {DEFAULT_PORT})",
    )

    args = parser.parse_args()

    if args.command == "serve":
        run_serve(host=args.host, port=args.port)
    else:
        run_serve()

    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
