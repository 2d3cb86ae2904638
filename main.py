"""Main entry point for the Xiangqi server."""

import argparse
import logging
import os

import uvicorn

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Xiangqi Rules Engine Server")
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
        "--depth",
        "-d",
        type=int,
        default=None,
        help="Search depth for the hard tier (default: 2)",
    )
    parser.add_argument(
        "--no-search",
        action="store_true",
        help="Hard tier plays the top heuristic move instead of searching",
    )
    parser.add_argument(
        "--difficulty",
        choices=["easy", "medium", "hard"],
        default=None,
        help="Default difficulty for new games (default: medium)",
    )
    parser.add_argument(
        "--advisor-timeout",
        type=float,
        default=None,
        help="Seconds to wait for an external advisor (default: 8)",
    )
    parser.add_argument(
        "--log-level",
        default=os.environ.get("XIANGQI_LOG_LEVEL", "INFO"),
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Enable auto-reload for development",
    )

    args = parser.parse_args()

    # api.py reads its settings from the environment at import time
    if args.depth is not None:
        os.environ["XIANGQI_SEARCH_DEPTH"] = str(args.depth)
    if args.no_search:
        os.environ["XIANGQI_USE_SEARCH"] = "false"
    if args.difficulty:
        os.environ["XIANGQI_DEFAULT_DIFFICULTY"] = args.difficulty
    if args.advisor_timeout is not None:
        os.environ["XIANGQI_ADVISOR_TIMEOUT"] = str(args.advisor_timeout)
    os.environ["XIANGQI_LOG_LEVEL"] = args.log_level.upper()

    logging.basicConfig(
        level=args.log_level.upper(),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
