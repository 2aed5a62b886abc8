"""termlog server - main entry point."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import uvicorn

from .api import create_app
from .config import load_config
from .errors import ConfigError

LOG_FORMAT = "%(asctime)s [termlog] %(levelname)s %(message)s"

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termlog-server",
        description="termlog server - HTTP record keeping for terminal logs",
    )
    parser.add_argument(
        "--config",
        "-c",
        type=Path,
        help="Path to config file (default: auto-detect in current directory)",
    )
    parser.add_argument("--host", help="Interface to bind (default: from config)")
    parser.add_argument("--port", "-p", type=int, help="Port to listen on (default: from config)")
    parser.add_argument(
        "--database",
        "-d",
        type=Path,
        help="SQLite database file (default: from config)",
    )
    return parser


def main() -> None:
    """Main entry point."""
    args = build_parser().parse_args()

    try:
        config = load_config(config_path=args.config)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    if args.host:
        config.server.host = args.host
    if args.port:
        config.server.port = args.port
    if args.database:
        config.server.database = args.database.resolve()

    level = config.log_level or "INFO"
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)

    app = create_app(config)
    logger.info("Server is running at http://%s:%d", config.server.host, config.server.port)
    # uvicorn turns SIGINT/SIGTERM into a lifespan shutdown, which closes the store
    uvicorn.run(app, host=config.server.host, port=config.server.port, log_level=level.lower())


if __name__ == "__main__":  # pragma: no cover
    main()
