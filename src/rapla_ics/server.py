"""HTTP proxy serving Rapla calendars as ICS or JSON.

Usage::

    rapla-ics serve --port 8080
    curl "http://127.0.0.1:8080/?key=...&salt=..."
"""

from __future__ import annotations

import logging

import requests
from fastapi import FastAPI
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .cache import CalendarCache
from .config import Settings, get_settings
from .errors import ExtractionError
from .ics import serialize
from .rapla_ics import RaplaIcs

logger = logging.getLogger(__name__)

ICS_MEDIA_TYPE = "text/calendar"


def create_app(
    settings: Settings | None = None,
    cache: CalendarCache | None = None,
) -> FastAPI:
    """Create the proxy application.

    :param settings: Upstream and cache settings. Read from the
        environment when omitted.
    :param cache: Calendar cache shared by all requests.
    :returns: The FastAPI application.
    """
    if settings is None:
        settings = get_settings()
    if cache is None:
        cache = CalendarCache(ttl=settings.cache_ttl, enabled=settings.cache_enabled)

    app = FastAPI(title="rapla-ics")
    app.state.settings = settings
    app.state.cache = cache

    @app.get("/healthz")
    def healthz() -> dict[str, str]:
        return {"status": "ok"}

    # Plain def: requests blocks, so FastAPI runs this in its threadpool
    @app.get("/")
    def calendar(
        key: str | None = None,
        salt: str | None = None,
        json: bool = False,
    ) -> Response:
        if not key:
            return PlainTextResponse("missing `key` query parameter", status_code=400)
        if not salt:
            return PlainTextResponse("missing `salt` query parameter", status_code=400)

        client = RaplaIcs(
            key,
            salt,
            base_url=settings.base_url,
            weeks_back=settings.weeks_back,
            pages=settings.pages,
            detail_format=settings.detail_format,
        )
        url = client.build_url()

        try:
            cal = cache.get_or_load(url, lambda: client.get_calendar(url))
        except ExtractionError as exc:
            logger.error("Could not parse calendar %s: %s", key, exc)
            return PlainTextResponse("could not read calendar", status_code=502)
        except requests.RequestException as exc:
            logger.error("Could not fetch calendar %s: %s", key, exc)
            return PlainTextResponse("could not read calendar", status_code=502)

        if json:
            return JSONResponse(cal.to_dict())
        return Response(serialize(cal), media_type=ICS_MEDIA_TYPE)

    return app
