"""CLI entry point for toolsmith-server.

This module provides the command-line interface for starting the toolsmith-server.
It can be invoked as `toolsmith-server` (via the script entry point) or
`python -m toolsmith_server`.
"""

import argparse
import logging
import sys

import uvicorn

from toolsmith_server import __version__, create_app
from toolsmith_server.config import ToolsmithServerSettings


def main() -> None:
    """Main entry point for the toolsmith-server CLI.

    Parses command-line arguments and starts the uvicorn server with the
    FastAPI application.
    """
    parser = argparse.ArgumentParser(
        prog="toolsmith-server",
        description="Schema-driven tool discovery and orchestration server",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"toolsmith-server {__version__}",
    )

    parser.add_argument(
        "--host",
        type=str,
        default=None,
        help="Host to bind the server to (default: 127.0.0.1, can be set via TOOLSMITH_HOST)",
    )

    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to bind the server to (default: 8000, can be set via TOOLSMITH_PORT)",
    )

    parser.add_argument(
        "--backend-url",
        type=str,
        default=None,
        help="Backend root URL (default: http://localhost:8080, "
        "can be set via TOOLSMITH_BACKEND_URL)",
    )

    parser.add_argument(
        "--data-dir",
        type=str,
        default=None,
        help="Directory holding the configuration record (default: ., "
        "can be set via TOOLSMITH_DATA_DIR)",
    )

    parser.add_argument(
        "--log-level",
        type=str,
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Logging level (default: INFO, can be set via TOOLSMITH_LOG_LEVEL)",
    )

    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development (uvicorn --reload)",
    )

    args = parser.parse_args()

    # CLI args override environment variables
    settings_kwargs = {}
    if args.host is not None:
        settings_kwargs["host"] = args.host
    if args.port is not None:
        settings_kwargs["port"] = args.port
    if args.backend_url is not None:
        settings_kwargs["backend_url"] = args.backend_url
    if args.data_dir is not None:
        settings_kwargs["data_dir"] = args.data_dir
    if args.log_level is not None:
        settings_kwargs["log_level"] = args.log_level

    settings = ToolsmithServerSettings(**settings_kwargs)

    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.host,
        port=settings.port,
        log_level=settings.log_level.lower(),
        reload=args.reload,
    )


if __name__ == "__main__":
    sys.exit(main())
