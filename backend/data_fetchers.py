"""IP Weather Backend — External Data Fetchers (ip-api geolocation, Open-Meteo weather)"""

import time
import logging
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from config import GEOIP_API_URL, WEATHER_API_URL, GEOIP_CACHE_TTL, WEATHER_CACHE_TTL
from cache import TTLCache
from errors import UpstreamError
from models import GeoRecord, WeatherRecord

logger = logging.getLogger("ipweather.fetchers")

STAGE_LOCATION = "location"
STAGE_WEATHER = "weather"


async def _fetch_json(client: httpx.AsyncClient, stage: str, url: str, params: Optional[dict] = None) -> Any:
    """GET ``url`` and decode the JSON body, mapping every failure to UpstreamError."""
    try:
        r = await client.get(url, params=params)
        r.raise_for_status()
        return r.json()
    except httpx.HTTPStatusError as e:
        logger.warning(f"{stage} API returned {e.response.status_code}")
        raise UpstreamError(stage) from e
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning(f"{stage} API request failed: {e!r}")
        raise UpstreamError(stage) from e
    except ValueError as e:
        logger.warning(f"{stage} API returned a non-JSON body: {e}")
        raise UpstreamError(stage) from e


# ─────────────────────────── Geo-IP ─────────────────────────────

class GeoIpResolver:
    """Resolves an IP to a GeoRecord, going to ip-api only on a cache miss."""

    def __init__(self, client: httpx.AsyncClient, cache: TTLCache,
                 url_template: str = GEOIP_API_URL, ttl: int = GEOIP_CACHE_TTL):
        self.client = client
        self.cache = cache
        self.url_template = url_template
        self.ttl = ttl

    async def resolve(self, ip: str) -> GeoRecord:
        cached = self.cache.get(ip)
        if cached is not None:
            logger.debug(f"GeoIP cache hit for {ip}")
            return cached

        logger.info(f"Fetching GeoIP fresh response for {ip}")
        data = await _fetch_json(self.client, STAGE_LOCATION, self.url_template.format(ip=ip))
        try:
            record = GeoRecord.model_validate(data)
        except ValidationError as e:
            logger.warning(f"GeoIP response for {ip} has unexpected shape: {e.error_count()} errors")
            raise UpstreamError(STAGE_LOCATION) from e

        if record.status == "fail":
            logger.warning(f"GeoIP lookup failed for {ip}: {record.message}")
            raise UpstreamError(STAGE_LOCATION)

        record.expires_at = time.time() + self.ttl
        self.cache.set(ip, record, expires_at=record.expires_at)
        return record


# ─────────────────────────── Weather ────────────────────────────

def weather_cache_key(lat: float, lon: float) -> str:
    # Exact coordinates, no rounding
    return f"{lat},{lon}"


class WeatherResolver:
    """Resolves coordinates to current conditions from Open-Meteo, cached for a short TTL."""

    def __init__(self, client: httpx.AsyncClient, cache: TTLCache,
                 url: str = WEATHER_API_URL, ttl: int = WEATHER_CACHE_TTL):
        self.client = client
        self.cache = cache
        self.url = url
        self.ttl = ttl

    async def resolve(self, lat: float, lon: float) -> WeatherRecord:
        cache_key = weather_cache_key(lat, lon)
        cached = self.cache.get(cache_key)
        if cached is not None:
            logger.debug(f"Weather cache hit for {cache_key}")
            return cached

        logger.info(f"Fetching weather fresh response for {cache_key}")
        data = await _fetch_json(
            self.client, STAGE_WEATHER, self.url,
            params={"latitude": lat, "longitude": lon, "current_weather": "true"},
        )
        try:
            record = WeatherRecord.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Weather response for {cache_key} has unexpected shape: {e.error_count()} errors")
            raise UpstreamError(STAGE_WEATHER) from e

        record.expires_at = time.time() + self.ttl
        self.cache.set(cache_key, record, expires_at=record.expires_at)
        return record
