"""oauthflow entry point.

Serves the demo app: ``oauthflow --profiles profiles.json``.
"""

import argparse
import logging
import sys
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_version
from pathlib import Path

from oauthflow.config import validate_settings
from oauthflow.errors import ConfigurationError
from oauthflow.logging_setup import setup_logging

logger = logging.getLogger(__name__)


def _version() -> str:
    try:
        return get_version("oauthflow")
    except PackageNotFoundError:
        return "unknown"


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="oauthflow",
        description="OAuth2 authorization code flow demo server",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  oauthflow --profiles profiles.json                 Serve on 127.0.0.1:3000
  oauthflow --profiles p.json --public-host app.example.com --secure
""",
    )
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", "-p", type=int, default=3000, help="Bind port")
    parser.add_argument("--profiles", type=Path, help="JSON file with OAuth2 profiles")
    parser.add_argument(
        "--public-host",
        help="External host[:port] used in redirect URIs (default: settings host)",
    )
    secure = parser.add_mutually_exclusive_group()
    secure.add_argument(
        "--secure", dest="secure", action="store_true", default=None, help="Use https URIs"
    )
    secure.add_argument(
        "--insecure", dest="secure", action="store_false", default=None, help="Use http URIs"
    )
    parser.add_argument("--log-level", help="Log level (default: settings log_level)")
    parser.add_argument("--version", "-v", action="version", version=f"%(prog)s {_version()}")

    args = parser.parse_args(argv)

    try:
        settings = validate_settings()
    except ConfigurationError as e:
        setup_logging("INFO")
        logger.error("Invalid configuration: %s", e)
        return 2

    updates = {}
    if args.profiles is not None:
        updates["profiles_file"] = args.profiles
    if args.public_host:
        updates["host"] = args.public_host
    if args.secure is not None:
        updates["secure"] = args.secure
    if args.log_level:
        updates["log_level"] = args.log_level
    settings = settings.model_copy(update=updates)

    setup_logging(settings.log_level)

    from oauthflow.app import run_server

    try:
        run_server(settings, host=args.host, port=args.port)
    except ConfigurationError as e:
        logger.error("Invalid configuration: %s", e)
        return 2
    return 0


if __name__ == "__main__":
    sys.exit(main())
