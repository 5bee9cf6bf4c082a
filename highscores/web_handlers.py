"""
Web route handlers for the leaderboard.
"""

import json
import logging
from pathlib import Path
from typing import Any, List, Optional

from aiohttp import web
from jinja2 import Environment, FileSystemLoader, TemplateError, select_autoescape

from .errors import SerializationError, StorageError, ValidationError
from .models import PlayerRecord, ScoreSubmission

logger = logging.getLogger(__name__)

TEMPLATES_PATH = Path(__file__).parent / "templates"

GEO_FIELDS = ("country", "region", "city", "city_lat_long")


class WebHandlers:
    """Handles web routes and responses."""

    def __init__(
        self,
        store: Any,
        config: Any,
        templates_path: Optional[str] = None,
    ) -> None:
        self.store = store
        self.config = config

        self.jinja_env = Environment(
            loader=FileSystemLoader(str(templates_path or TEMPLATES_PATH)),
            autoescape=select_autoescape(["html"]),
            auto_reload=False,
            cache_size=50,
        )

    def _dumps(
        self,
        records: List[PlayerRecord],
    ) -> str:
        """
        Encode records as a JSON array.

        @param records: Records to encode
        @return: JSON text
        @raise SerializationError: If a record cannot be encoded
        """
        try:
            return json.dumps([record.to_dict() for record in records])
        except (TypeError, ValueError, AttributeError) as e:
            raise SerializationError(str(e)) from e

    def _render(
        self,
        template_name: str,
        **context: Any,
    ) -> str:
        try:
            template = self.jinja_env.get_template(template_name)
            return template.render(**context)
        except TemplateError as e:
            raise SerializationError(f"Can't render {template_name}: {e}") from e

    def _geo_metadata(
        self,
        request: web.Request,
    ) -> dict:
        """
        Read the coarse location headers set by the hosting front end.

        @param request: Incoming request
        @return: Dictionary of country, region, city and city_lat_long (may be empty strings)
        """
        headers = self.config.get("geo_headers") or {}
        return {
            field: request.headers.get(headers[field], "") if headers.get(field) else ""
            for field in GEO_FIELDS
        }

    async def web_index(
        self,
        _: web.Request,
    ) -> web.Response:
        """
        HTML leaderboard page.

        @param _: Unused request parameter
        @return: HTTP response with the rendered table, or 404 on failure
        """
        try:
            players = await self.store.list_top_players(self.config.players_limit)
            html = self._render(
                "players.html", title=self.config.get("title"), players=players
            )
        except StorageError as e:
            logger.error("Can't load players from database: %s", e)
            return web.Response(status=404)
        except SerializationError as e:
            logger.error("Can't render players page: %s", e)
            return web.Response(status=404)

        return web.Response(text=html, content_type="text/html")

    async def web_api_players(
        self,
        _: web.Request,
    ) -> web.Response:
        """
        JSON array of the best record per player.

        @param _: Unused request parameter
        @return: JSON response, or 404 on failure
        """
        try:
            players = await self.store.list_top_players(self.config.players_limit)
            body = self._dumps(players)
        except StorageError as e:
            logger.error("Can't load players from database: %s", e)
            return web.Response(status=404)
        except SerializationError as e:
            logger.error("Can't convert players to json: %s", e)
            return web.Response(status=404)

        return web.Response(text=body, content_type="application/json")

    async def web_api_results(
        self,
        _: web.Request,
    ) -> web.Response:
        """
        JSON array of the raw submission history.

        @param _: Unused request parameter
        @return: JSON response, or 404 on failure
        """
        try:
            results = await self.store.list_all_submissions(self.config.results_limit)
            body = self._dumps(results)
        except StorageError as e:
            logger.error("Can't load results from database: %s", e)
            return web.Response(status=404)
        except SerializationError as e:
            logger.error("Can't convert results to json: %s", e)
            return web.Response(status=404)

        return web.Response(text=body, content_type="application/json")

    async def web_submit_score(
        self,
        request: web.Request,
    ) -> web.Response:
        """
        Accept a score submission from a game client.

        The body must be ``{"name": str, "time": int}``. Invalid bodies are
        rejected before the store is touched. Storage failures are logged and
        the client still gets a success response.

        @param request: HTTP request with the JSON body
        @return: 200 on acceptance, 400/422 with field errors on invalid input
        """
        try:
            payload = await request.json()
        except (ValueError, RecursionError) as e:
            logger.info("Rejected undecodable submission: %s", e)
            return web.json_response(
                {"errors": {"body": "Invalid JSON"}}, status=400
            )

        try:
            submission = ScoreSubmission.from_payload(payload)
        except ValidationError as e:
            logger.info("Rejected submission %r: %s", payload, e)
            return web.json_response({"errors": e.errors}, status=e.status)

        record = submission.to_record(
            source_ip=request.remote or "",
            **self._geo_metadata(request),
        )
        logger.info("RECEIVE: %s", submission)
        logger.info("SAVE: %s", record)

        try:
            await self.store.upsert_best(record.identity_key, record)
        except StorageError as e:
            logger.error("Can't save player[%s] in database: %s", record, e)

        return web.json_response({"status": "ok"})
