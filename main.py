"""Main entry point for Xiangqi AI server."""

import argparse
import logging
import os
import uvicorn

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Xiangqi AI Server")
    parser.add_argument(
        "--depth",
        "-d",
        type=int,
        default=None,
        help="Default search depth for new games (default: 5)",
    )
    parser.add_argument(
        "--thinking-time",
        type=float,
        default=None,
        help="Delay in seconds before the AI searches (default: 1.0)",
    )
    parser.add_argument(
        "--host",
        type=str,
        default="0.0.0.0",
        help="Host to bind to (default: 0.0.0.0)",
    )
    parser.add_argument(
        "--port",
        "-p",
        type=int,
        default=8000,
        help="Port to bind to (default: 8000)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        default="info",
        choices=["debug", "info", "warning", "error"],
        help="Logging level (default: info)",
    )

    args = parser.parse_args()
    if args.depth is not None and args.depth < 1:
        parser.error("--depth must be at least 1")

    logging.basicConfig(
        level=getattr(logging, args.log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    # Defaults are picked up by api.py through the environment, which also
    # reaches the worker process when --reload is used
    if args.depth is not None:
        os.environ["XIANGQI_SEARCH_DEPTH"] = str(args.depth)
        print(f"Search depth: {args.depth}")
    if args.thinking_time is not None:
        os.environ["XIANGQI_THINKING_TIME"] = str(args.thinking_time)
        print(f"Thinking time: {args.thinking_time}s")

    uvicorn.run(
        "api:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level=args.log_level,
    )
