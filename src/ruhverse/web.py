from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Mapping
from zoneinfo import ZoneInfo

from fastapi import FastAPI, HTTPException, Query
from fastapi.responses import HTMLResponse, JSONResponse, RedirectResponse

from .cache import CACHE_TTL_SECONDS, DatasetCache
from .insights import daily_insights
from .models import TOTAL_CHAPTERS, EditionPair, MalformedResponseError
from .prayer import active_prayer, next_prayer, prayer_schedule
from .remote import PrayerTimesClient, QuranCloudClient, UpstreamFetchError
from .render import CANONICAL_ROOT_PATH, DEFAULT_BASE_URL, PageRenderer

logger = logging.getLogger(__name__)

DEFAULT_PORT = 3000


@dataclass(slots=True)
class WebConfig:
    base_url: str = DEFAULT_BASE_URL
    host: str = "0.0.0.0"
    port: int = DEFAULT_PORT
    cache_ttl: float = CACHE_TTL_SECONDS
    legacy_bootstrap: bool = False
    serve_stale: bool = True
    timezone: str = "Asia/Kolkata"
    request_timeout: float = 30.0

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "WebConfig":
        env = os.environ if environ is None else environ
        config = cls()
        base_url = env.get("PUBLIC_BASE_URL", "").strip()
        if base_url:
            config.base_url = base_url.rstrip("/")
        port = env.get("PORT", "").strip()
        if port:
            try:
                config.port = int(port)
            except ValueError as exc:
                raise ValueError(f"PORT must be an integer, got {port!r}") from exc
        return config


def create_app(
    config: WebConfig,
    *,
    quran_client: QuranCloudClient | None = None,
    prayer_client: PrayerTimesClient | None = None,
    cache: DatasetCache | None = None,
) -> FastAPI:
    try:
        tz = ZoneInfo(config.timezone)
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Unknown timezone: {config.timezone}") from exc

    quran_client = quran_client or QuranCloudClient(timeout=config.request_timeout)
    prayer_client = prayer_client or PrayerTimesClient(timeout=config.request_timeout)
    cache = cache or DatasetCache(quran_client.fetch_full_dataset, ttl=config.cache_ttl)
    renderer = PageRenderer(
        cache,
        config.base_url,
        legacy_bootstrap=config.legacy_bootstrap,
        serve_stale=config.serve_stale,
    )

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        try:
            yield
        finally:
            quran_client.close()
            prayer_client.close()

    app = FastAPI(title="RuhVerse", lifespan=lifespan)
    app.state.config = config
    app.state.cache = cache
    app.state.renderer = renderer

    @app.get("/")
    def index() -> RedirectResponse:
        return RedirectResponse(CANONICAL_ROOT_PATH, status_code=307)

    @app.get("/quran.html", response_class=HTMLResponse)
    @app.get("/quran", response_class=HTMLResponse)
    def quran_page() -> HTMLResponse:
        return HTMLResponse(renderer.render(0, CANONICAL_ROOT_PATH))

    @app.get("/quran/surah/{surah_number}", response_class=HTMLResponse)
    def surah_page(surah_number: str):
        if not (surah_number.isascii() and surah_number.isdigit()):
            raise HTTPException(status_code=404, detail="Surah not found")
        number = int(surah_number)
        if number == 1:
            return RedirectResponse(CANONICAL_ROOT_PATH, status_code=301)
        if number < 1 or number > TOTAL_CHAPTERS:
            raise HTTPException(status_code=404, detail="Surah not found")
        return HTMLResponse(renderer.render(number - 1, f"/quran/surah/{number}"))

    @app.get("/api/quran-data")
    def api_quran_data() -> JSONResponse:
        try:
            pair: EditionPair = renderer.dataset()
        except (UpstreamFetchError, MalformedResponseError) as exc:
            logger.error("Dataset request failed: %s", exc)
            return JSONResponse({"error": "Failed to load Quran data"}, status_code=502)
        return JSONResponse(pair.as_payload())

    @app.get("/api/prayer-times")
    def api_prayer_times(
        latitude: float | None = Query(None),
        longitude: float | None = Query(None),
        city: str | None = Query(None),
        country: str = Query(""),
    ) -> JSONResponse:
        now = datetime.now(tz)
        try:
            if city and city.strip():
                timings = prayer_client.timings_by_city(city, country)
            elif latitude is not None and longitude is not None:
                timings = prayer_client.timings(latitude, longitude, now.date())
            else:
                raise HTTPException(
                    status_code=400,
                    detail="Provide latitude and longitude, or city.",
                )
            schedule = prayer_schedule(timings)
        except (UpstreamFetchError, MalformedResponseError) as exc:
            logger.error("Prayer times request failed: %s", exc)
            return JSONResponse({"error": "Failed to load prayer times"}, status_code=502)
        return JSONResponse(
            {
                "timings": schedule,
                "next": next_prayer(schedule, now).as_payload(),
                "active": active_prayer(schedule, now),
            }
        )

    @app.get("/api/insights")
    def api_insights() -> JSONResponse:
        today = datetime.now(timezone.utc).date()
        return JSONResponse(
            {
                "date": today.isoformat(),
                "insights": [item.as_payload() for item in daily_insights(today)],
            }
        )

    return app
