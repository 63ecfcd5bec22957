"""Command-line interface for the Gmail HTTP API.

This module provides the ``gmail-http-api`` entry point.
"""

from __future__ import annotations

import argparse
import sys

import structlog
import uvicorn

from gmail_http_api import __version__
from gmail_http_api.api.middleware import configure_logging
from gmail_http_api.commands import TOOL_SPECS
from gmail_http_api.config import get_settings
from gmail_http_api.exceptions import ConfigurationError

logger = structlog.get_logger()


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="gmail-http-api", description="Gmail HTTP API")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    subparsers = parser.add_subparsers(dest="command", required=True)

    serve_parser = subparsers.add_parser("serve", help="Run the HTTP server")
    serve_parser.add_argument("--host", default=None, help="Bind address (default: HOST or 0.0.0.0)")
    serve_parser.add_argument("--port", type=int, default=None, help="Port (default: PORT or 3000)")
    serve_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    subparsers.add_parser("tools", help="Print the tool catalogue")

    return parser


def _cmd_serve(parsed: argparse.Namespace) -> int:
    try:
        settings = get_settings()
    except ConfigurationError as exc:
        print(str(exc), file=sys.stderr)
        return 1

    configure_logging(settings)

    host = parsed.host or settings.host
    port = parsed.port or settings.port
    logger.info("gmail_http_api_started", version=__version__, host=host, port=port, debug=settings.debug)

    uvicorn.run(
        "gmail_http_api.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=parsed.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def _cmd_tools() -> int:
    for spec in TOOL_SPECS.values():
        print(f"{spec.tool.value:<24} {spec.method:<7} {spec.path}")
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        args: Command-line arguments. If None, uses sys.argv.

    Returns:
        Exit code (0 for success, non-zero for failure).
    """
    if args is None:
        args = sys.argv[1:]

    parsed = _build_parser().parse_args(args)

    if parsed.command == "serve":
        return _cmd_serve(parsed)
    if parsed.command == "tools":
        return _cmd_tools()

    logger.error("unknown_command", command=parsed.command)
    return 2


if __name__ == "__main__":
    sys.exit(main())
