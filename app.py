#!/usr/bin/env python3
"""
Leaderboard server for game clients.
Accepts score submissions over HTTP and serves the best times as HTML and JSON.
"""

import argparse
import asyncio
import os
from pathlib import Path

from highscores.config import LeaderboardConfig
from highscores.logging_setup import configure_logging
from highscores.server import LeaderboardServer


async def main():
    """Main function with command line interface."""

    parser = argparse.ArgumentParser(
        description="Leaderboard server with HTML and JSON listings",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )

    parser.add_argument(
        "--host",
        default=None,
        help="Host to bind the server to (overrides config and env: HOST)"
    )
    parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="HTTP port (overrides config and env: PORT)"
    )
    parser.add_argument(
        "--db",
        default=None,
        help="SQLite database file path (overrides config and env: DB_PATH)"
    )
    parser.add_argument(
        "--config",
        default=os.getenv("CONFIG_PATH", "leaderboard_config.json"),
        help="Configuration file path (env: CONFIG_PATH)"
    )

    args = parser.parse_args()

    config_path = Path(args.config)

    if config_path.exists() and not config_path.is_file():
        print(f"Error: {args.config} exists but is not a file")
        return

    config = LeaderboardConfig(args.config)
    configure_logging(config.get("logging", "level"))

    if args.host:
        config.config["server"]["host"] = args.host
    if args.port:
        config.config["server"]["port"] = args.port
    if args.db:
        config.config["database"]["path"] = args.db

    server = LeaderboardServer(config)

    try:
        await server.run()
    except KeyboardInterrupt:
        print("\nServer interrupted")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass
