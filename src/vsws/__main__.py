"""
=============================================================================
VSWS CLI ENTRY POINT
=============================================================================

    # Serve ./templates on 127.0.0.1:9999
    python -m vsws

    # Another content root and port
    python -m vsws --root ./public --port 8000

    # Listen on all interfaces (for containers)
    python -m vsws --host 0.0.0.0

    # JSON access log, debug diagnostics
    python -m vsws --log-format json --log-level DEBUG

Settings come from, in order of priority: command-line arguments, VSWS_*
environment variables, ServerConfig defaults.

=============================================================================
"""

import argparse
import sys
from typing import Optional, Sequence

from . import __version__
from .config import LOG_FORMATS, ServerConfig
from .server import WebServer


def build_parser(defaults: ServerConfig) -> argparse.ArgumentParser:
    """Argument parser whose defaults come from the given config."""
    parser = argparse.ArgumentParser(
        prog="vsws",
        description="Very Simple Web Server: serves static files over HTTP/1.1",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python -m vsws                            # Serve ./templates on port 9999
  python -m vsws --root ./public -p 8000    # Custom root and port
  python -m vsws --host 0.0.0.0             # Listen on all interfaces
        """,
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

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

    # ─────────────────────────────────────────────────────────────────────
    # CONTENT ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--root", "-r",
        default=defaults.root,
        help=f"Directory to serve files from (default: {defaults.root})",
    )

    parser.add_argument(
        "--index",
        default=defaults.index_file,
        help=f"File served for / (default: {defaults.index_file})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # REQUEST HANDLING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--buffer-size",
        type=int,
        default=defaults.buffer_size,
        help=f"Bytes read from each request (default: {defaults.buffer_size})",
    )

    parser.add_argument(
        "--timeout",
        type=float,
        default=defaults.timeout,
        help=f"Seconds to wait for a request (default: {defaults.timeout:g})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=defaults.log_level.upper(),
        help=f"Logging level (default: {defaults.log_level})",
    )

    parser.add_argument(
        "--log-format",
        choices=list(LOG_FORMATS),
        default=defaults.log_format,
        help=f"Access log format (default: {defaults.log_format})",
    )

    # ─────────────────────────────────────────────────────────────────────
    # META ARGUMENTS
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"VSWS {__version__}",
    )

    return parser


def config_from_args(argv: Optional[Sequence[str]] = None) -> ServerConfig:
    """Environment first, then command-line overrides on top."""
    env_config = ServerConfig.from_env()
    args = build_parser(env_config).parse_args(argv)

    return ServerConfig(
        host=args.host,
        port=args.port,
        root=args.root,
        index_file=args.index,
        buffer_size=args.buffer_size,
        timeout=args.timeout,
        log_level=args.log_level,
        log_format=args.log_format,
    )


def main(argv: Optional[Sequence[str]] = None):
    """Main CLI entry point."""
    try:
        config = config_from_args(argv)
        server = WebServer(config)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(2)

    try:
        server.run()
    except OSError as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
