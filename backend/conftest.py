"""Shared fixtures: canned upstream payloads and a recording mock transport."""

import json

import httpx
import pytest

TOKYO_GEO = {
    "status": "success",
    "country": "Japan",
    "countryCode": "JP",
    "region": "13",
    "regionName": "Tokyo",
    "city": "Tokyo",
    "zip": "151-0053",
    "lat": 35.68,
    "lon": 139.69,
    "timezone": "Asia/Tokyo",
    "isp": "Linode",
    "org": "Linode LLC",
    "as": "AS63949 Akamai Connected Cloud",
    "query": "139.162.65.37",
}

TOKYO_WEATHER = {
    "latitude": 35.7,
    "longitude": 139.6875,
    "generationtime_ms": 0.04,
    "utc_offset_seconds": 0,
    "timezone": "GMT",
    "timezone_abbreviation": "GMT",
    "elevation": 40.0,
    "current_weather": {
        "temperature": 21.3,
        "windspeed": 5.1,
        "winddirection": 270,
        "weathercode": 1,
        "is_day": 1,
        "time": "2024-01-01T12:00",
    },
}


class FakeUpstream:
    """Answers both upstream hosts from canned payloads and records every call.

    Set ``geo``/``weather`` to a dict (200 JSON), an int (bare status code),
    an exception instance (raised as a transport error) or a str (raw body).
    """

    def __init__(self, geo=None, weather=None):
        self.geo = TOKYO_GEO if geo is None else geo
        self.weather = TOKYO_WEATHER if weather is None else weather
        self.geo_calls: list[httpx.Request] = []
        self.weather_calls: list[httpx.Request] = []

    def _reply(self, request, payload):
        if isinstance(payload, Exception):
            raise payload
        if isinstance(payload, int):
            return httpx.Response(payload, request=request)
        if isinstance(payload, str):
            return httpx.Response(200, content=payload.encode(), request=request)
        return httpx.Response(200, content=json.dumps(payload).encode(),
                              headers={"content-type": "application/json"}, request=request)

    def handler(self, request: httpx.Request) -> httpx.Response:
        if request.url.host == "ip-api.com":
            self.geo_calls.append(request)
            return self._reply(request, self.geo)
        if request.url.host == "api.open-meteo.com":
            self.weather_calls.append(request)
            return self._reply(request, self.weather)
        return httpx.Response(404, request=request)

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)


@pytest.fixture
def upstream():
    return FakeUpstream()
