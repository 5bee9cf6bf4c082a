"""
LeaderboardServer wires the record store, handlers and aiohttp application.
"""

import asyncio
import logging
from typing import Optional

import aiohttp_cors
from aiohttp import web, web_runner

from .config import LeaderboardConfig
from .database import RecordStore
from .web_handlers import WebHandlers

logger = logging.getLogger(__name__)


class LeaderboardServer:
    """Async leaderboard HTTP server."""

    def __init__(
        self,
        config: LeaderboardConfig,
        store: Optional[RecordStore] = None,
    ) -> None:
        self.config = config
        self.host = config.get("server", "host")
        self.port = config.get("server", "port")

        self.store = store or RecordStore(config.get("database", "path"))
        self.web_handlers = WebHandlers(self.store, self.config)

    async def init_db(self) -> None:
        """
        Initialize the database.

        Creates database tables and indexes if they do not exist yet.
        """
        await self.store.init_db()

    def build_app(self) -> web.Application:
        """
        Create the aiohttp application with all routes registered.

        @return: Configured web.Application
        """
        app = web.Application()

        app.router.add_get("/", self.web_handlers.web_index)
        app.router.add_post("/", self.web_handlers.web_submit_score)
        app.router.add_get("/players.json", self.web_handlers.web_api_players)
        app.router.add_get("/results.json", self.web_handlers.web_api_results)

        if self.config.get("cors", "enabled"):
            # Browser builds of the game client post from another origin
            cors = aiohttp_cors.setup(
                app,
                defaults={
                    "*": aiohttp_cors.ResourceOptions(
                        allow_credentials=False,
                        expose_headers="*",
                        allow_headers="*",
                        allow_methods=["GET", "POST"],
                    )
                },
            )
            for route in list(app.router.routes()):
                cors.add(route)

        return app

    async def start(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
    ) -> web_runner.AppRunner:
        """
        Start serving HTTP.

        @param host: Host address to bind to (default uses configured host)
        @param port: Port number to use (default uses configured port)
        @return: AppRunner instance for the web server
        """
        if host is None:
            host = self.host
        if port is None:
            port = self.port

        app_runner = web_runner.AppRunner(self.build_app())
        await app_runner.setup()

        site = web_runner.TCPSite(app_runner, host, port)
        await site.start()

        logger.info("Leaderboard running on http://%s:%s", host, port)
        return app_runner

    async def run(self) -> None:
        """
        Initialize the database and serve until cancelled.
        """
        await self.init_db()
        app_runner = await self.start()

        try:
            await asyncio.Event().wait()
        finally:
            logger.info("Shutting down server...")
            await app_runner.cleanup()
