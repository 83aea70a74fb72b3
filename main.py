"""
Entrypoint for the Inline Writing Assistant.
This file wires the FastAPI application together by importing the core package,
which initializes shared state and registers all routes.
"""

from __future__ import annotations

import argparse
import logging
import os

import uvicorn

from core.app_state import app, config, logger  # noqa: F401


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Inline Writing Assistant")
    parser.add_argument("--host", default=config.APP_HOST, help="Bind address")
    parser.add_argument("--port", type=int, default=config.APP_PORT, help="Bind port")
    parser.add_argument(
        "--reload",
        action="store_true",
        default=config.APP_RELOAD,
        help="Reload on code changes (development only)",
    )
    parser.add_argument(
        "--log-level",
        default=config.LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        type=str.upper,
        help="Log level for the server process",
    )
    parser.add_argument(
        "--extra-verbose",
        action="store_true",
        help="Log full prompts and responses for every request",
    )
    args = parser.parse_args()

    if args.extra_verbose:
        # Read by worker processes when config is loaded
        os.environ["EXTRA_VERBOSE"] = "true"
        config.EXTRA_VERBOSE = True

    if args.log_level != config.LOG_LEVEL:
        os.environ["LOG_LEVEL"] = args.log_level
        logging.getLogger().setLevel(args.log_level)

    logger.info("Starting on %s:%d", args.host, args.port)
    uvicorn.run(
        "core:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level.lower(),
    )
