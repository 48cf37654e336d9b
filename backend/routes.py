"""IP Weather Backend — FastAPI Routes"""

import asyncio
import logging
from contextlib import asynccontextmanager, suppress
from typing import Optional

import httpx
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import (
    VERSION, ALLOWED_ORIGINS, HTTP_TIMEOUT, FALLBACK_IP,
    GEOIP_CACHE_TTL, WEATHER_CACHE_TTL, CACHE_MAX_SIZE, CACHE_SWEEP_INTERVAL,
)
from cache import TTLCache, sweep_periodically
from data_fetchers import GeoIpResolver, WeatherResolver
from errors import AppError
from ip_utils import extract_client_ip
from models import ApiResponse, LocationWeather

logger = logging.getLogger("ipweather")


def _error_response(e: AppError) -> JSONResponse:
    body = ApiResponse(success=False, error=str(e))
    return JSONResponse(status_code=e.status_code, content=body.model_dump(exclude_none=True))


def create_app(
    geo_cache: Optional[TTLCache] = None,
    weather_cache: Optional[TTLCache] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
    fallback_ip: str = FALLBACK_IP,
    sweep_interval: int = CACHE_SWEEP_INTERVAL,
) -> FastAPI:
    """Build the app around explicitly supplied caches.

    ``transport`` is handed to the shared httpx client, so tests can swap in
    ``httpx.MockTransport`` for both upstreams.
    """
    if geo_cache is None:
        geo_cache = TTLCache(default_ttl=GEOIP_CACHE_TTL, max_size=CACHE_MAX_SIZE, name="geoip")
    if weather_cache is None:
        weather_cache = TTLCache(default_ttl=WEATHER_CACHE_TTL, max_size=CACHE_MAX_SIZE, name="weather")

    # ─────────────────────────── Lifecycle ──────────────────────────

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Open the shared upstream client and, if configured, the cache sweeper."""
        async with httpx.AsyncClient(timeout=HTTP_TIMEOUT, transport=transport) as client:
            app.state.geo_resolver = GeoIpResolver(client, geo_cache)
            app.state.weather_resolver = WeatherResolver(client, weather_cache)
            app.state.sweeper = None
            if sweep_interval > 0:
                app.state.sweeper = asyncio.create_task(
                    sweep_periodically([geo_cache, weather_cache], sweep_interval)
                )
                logger.info(f"Cache sweep enabled every {sweep_interval}s")
            try:
                yield
            finally:
                if app.state.sweeper is not None:
                    app.state.sweeper.cancel()
                    with suppress(asyncio.CancelledError):
                        await app.state.sweeper

    # ─────────────────────────── App Setup ──────────────────────────

    app = FastAPI(title="IP Weather API", version=VERSION, lifespan=lifespan)
    app.state.geo_cache = geo_cache
    app.state.weather_cache = weather_cache

    app.add_middleware(
        CORSMiddleware,
        allow_origins=ALLOWED_ORIGINS,
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    # ─────────────────────────── Main Endpoint ──────────────────────

    @app.get("/", response_model=ApiResponse, response_model_exclude_none=True)
    async def get_location_weather(request: Request):
        peer = request.client.host if request.client else ""
        try:
            ip = extract_client_ip(request.headers, peer, fallback_ip=fallback_ip)
            geo = await app.state.geo_resolver.resolve(ip)
            weather = await app.state.weather_resolver.resolve(geo.latitude, geo.longitude)
        except AppError as e:
            return _error_response(e)

        logger.info(f"Weather request: {ip} -> {geo.city}, {geo.country_code} ({geo.latitude}, {geo.longitude})")
        return ApiResponse(success=True, data=LocationWeather.from_records(geo, weather))

    @app.get("/api/health")
    async def health():
        return {
            "status": "ok",
            "version": VERSION,
            "geo_cache_size": len(geo_cache),
            "weather_cache_size": len(weather_cache),
        }

    return app


app = create_app()
