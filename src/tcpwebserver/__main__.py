"""
=============================================================================
WEB SERVER CLI ENTRY POINT
=============================================================================

=============================================================================
USAGE
=============================================================================

    # Run with defaults (0.0.0.0:8080, ./webroot)
    python -m tcpwebserver

    # Custom port
    python -m tcpwebserver 3000

    # Localhost only, another directory
    python -m tcpwebserver --host 127.0.0.1 --root ./public

    # JSON access log
    python -m tcpwebserver --log-format json

=============================================================================
CONFIGURATION PRECEDENCE
=============================================================================

    defaults  <  WEBSERVER_* environment variables  <  command line

Only options actually given on the command line override the environment.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import ServerConfig, LOG_FORMATS
from .server import WebServer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tcpwebserver",
        description="Static file web server built on raw TCP sockets",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m tcpwebserver                       # Port 8080, ./webroot
  python -m tcpwebserver 3000                  # Custom port
  python -m tcpwebserver --root ./public       # Serve another directory
  python -m tcpwebserver -l DEBUG              # Verbose logging
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "port",
        nargs="?",
        type=int,
        default=None,
        help="Port to listen on (default: 8080)"
    )

    parser.add_argument(
        "--host", "-H",
        default=None,
        help="Host to bind to (default: 0.0.0.0)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=None,
        help="Directory to serve, created with sample files if missing (default: webroot)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default=None,
        help="Access log format (default: text)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"TCPWebServer {__version__}"
    )

    return parser


def build_config(args: argparse.Namespace, environ: Optional[dict] = None) -> ServerConfig:
    """Environment first, then whatever the command line set explicitly."""
    config = ServerConfig.from_env(environ)

    if args.port is not None:
        config.port = args.port
    if args.host is not None:
        config.host = args.host
    if args.root is not None:
        config.root_dir = args.root
    if args.log_level is not None:
        config.log_level = args.log_level
    if args.log_format is not None:
        config.log_format = args.log_format

    return config


def main(argv: Optional[Sequence[str]] = None) -> int:
    """
    Main CLI entry point.

    Returns:
        Process exit status: 0 after a clean shutdown, 1 if the server
        could not start (bad config, port in use).
    """
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        server = WebServer(config)
        server.run()
    except (ValueError, OSError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


# =============================================================================
# ENTRY POINT
# =============================================================================

if __name__ == "__main__":
    sys.exit(main())
