"""
=============================================================================
CLI ENTRY POINT
=============================================================================

    # Serve on 127.0.0.1:9090, /files/ disabled
    python -m tinyhttpd

    # Serve /files/<path> from ./public
    python -m tinyhttpd --directory ./public

    # Other knobs
    python -m tinyhttpd --port 8080 --workers 8 --log-level DEBUG --log-format json

Unknown arguments are reported in the log and otherwise ignored.

Exit status:
    0  clean shutdown (Ctrl+C / SIGTERM)
    1  invalid configuration, or the address could not be bound

=============================================================================
"""

import argparse
import logging
import sys
from typing import Optional, Sequence

from . import __version__
from .access_log import configure_logging
from .config import LOG_FORMATS, LOG_LEVELS, ServerConfig
from .errors import ConfigError, TransportError
from .server import HTTPServer


logger = logging.getLogger("tinyhttpd")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tinyhttpd",
        description="Minimal concurrent HTTP/1.1 server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Routes:
  GET /                 200 "OK"
  GET /echo/<text>      200 <text>
  GET /user-agent       200 <User-Agent header>
  GET /files/<path>     200 file bytes from --directory
        """
    )

    # ─────────────────────────────────────────────────────────────────────
    # FILES
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--directory", "-d",
        default=None,
        help="Directory to serve /files/<path> from (default: disabled)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # NETWORK / CONCURRENCY
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--host", "-H",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )

    parser.add_argument(
        "--port", "-p",
        type=int,
        default=9090,
        help="Port to listen on (default: 9090)"
    )

    parser.add_argument(
        "--workers", "-w",
        type=int,
        default=4,
        help="Number of worker threads (default: 4)"
    )

    parser.add_argument(
        "--queue-size",
        type=int,
        default=16,
        help="Connections allowed to wait for a worker (default: 16)"
    )

    # ─────────────────────────────────────────────────────────────────────
    # LOGGING
    # ─────────────────────────────────────────────────────────────────────

    parser.add_argument(
        "--log-level", "-l",
        choices=LOG_LEVELS,
        default="INFO",
        help="Logging level (default: INFO)"
    )

    parser.add_argument(
        "--log-format",
        choices=LOG_FORMATS,
        default="text",
        help="Log output format (default: text)"
    )

    parser.add_argument(
        "--version", "-v",
        action="version",
        version=f"tinyhttpd {__version__}"
    )

    return parser


def parse_config(argv: Optional[Sequence[str]] = None) -> tuple[ServerConfig, list[str]]:
    """
    Translate command-line arguments into a ServerConfig.

    Returns:
        (config, unknown arguments)
    """
    args, unknown = build_parser().parse_known_args(argv)

    config = ServerConfig(
        serving_directory=args.directory,
        host=args.host,
        port=args.port,
        workers=args.workers,
        queue_size=args.queue_size,
        log_level=args.log_level,
        log_format=args.log_format,
    )
    return config, unknown


def main(argv: Optional[Sequence[str]] = None) -> int:
    config, unknown = parse_config(argv)
    configure_logging(config.log_level, config.log_format)

    for arg in unknown:
        logger.warning(f"Ignoring unknown argument: {arg}")

    try:
        server = HTTPServer(config)
    except ConfigError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    try:
        server.run()
    except TransportError as e:
        logger.error(f"{e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
