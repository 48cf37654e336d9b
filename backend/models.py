"""IP Weather Backend — Pydantic Models"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# ─────────────────────────── Upstream records ───────────────────

class GeoRecord(BaseModel):
    """ip-api.com lookup result, keyed in the cache by the queried IP."""

    model_config = ConfigDict(populate_by_name=True)

    status: Optional[str] = None  # "success" | "fail"
    message: str = ""             # only set when status == "fail"
    country: str = ""
    country_code: str = Field(default="", alias="countryCode")
    region: str = ""
    region_name: str = Field(default="", alias="regionName")
    city: str = ""
    zip: str = ""
    latitude: float = Field(alias="lat")
    longitude: float = Field(alias="lon")
    timezone: str = ""
    isp: str = ""
    org: str = ""
    as_info: str = Field(default="", alias="as")
    query_ip: str = Field(default="", alias="query")
    expires_at: float = 0.0


class CurrentWeather(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    temperature: float | int
    wind_speed: float | int = Field(alias="windspeed")
    wind_direction: float | int = Field(alias="winddirection")
    weather_code: int = Field(alias="weathercode")
    is_day: bool       # upstream sends 0 | 1
    observed_at: str = Field(alias="time")


class WeatherRecord(BaseModel):
    """open-meteo forecast with current conditions, keyed by "lat,lon"."""

    model_config = ConfigDict(populate_by_name=True)

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    generation_time_ms: Optional[float] = Field(default=None, alias="generationtime_ms")
    utc_offset_seconds: Optional[int] = None
    timezone: str = ""
    timezone_abbreviation: str = ""
    elevation: Optional[float] = None
    current_weather: CurrentWeather
    expires_at: float = 0.0


# ─────────────────────────── API response ───────────────────────

class CurrentWeatherInfo(BaseModel):
    temperature: float | int
    wind_speed: float | int
    wind_direction: float | int
    weather_code: int
    is_day: bool
    time: str


class LocationWeather(BaseModel):
    country: str
    country_code: str
    region: str
    region_name: str
    city: str
    timezone: str
    current_weather: CurrentWeatherInfo

    @classmethod
    def from_records(cls, geo: GeoRecord, weather: WeatherRecord) -> "LocationWeather":
        cw = weather.current_weather
        return cls(
            country=geo.country,
            country_code=geo.country_code,
            region=geo.region,
            region_name=geo.region_name,
            city=geo.city,
            timezone=geo.timezone,
            current_weather=CurrentWeatherInfo(
                temperature=cw.temperature,
                wind_speed=cw.wind_speed,
                wind_direction=cw.wind_direction,
                weather_code=cw.weather_code,
                is_day=cw.is_day,
                time=cw.observed_at,
            ),
        )


class ApiResponse(BaseModel):
    success: bool
    error: Optional[str] = None
    data: Optional[LocationWeather] = None
