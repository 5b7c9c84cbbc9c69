"""Helpers for fetching geocoding and daily forecast data from the OpenWeatherMap APIs."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import List, Optional, Sequence
from urllib.parse import urlencode

import requests
from pydantic import BaseModel, ConfigDict, ValidationError

from app import config
from utils.logging_utils import get_tagged_logger, mask_url_secrets
logger = get_tagged_logger(__name__, tag="openweathermap_client")

session = requests.Session()

GEOCODE_ZIP_PATH = "/geo/1.0/zip"
ONE_CALL_PATH = "/data/3.0/onecall"

# Only the daily block is used; skip the rest of the One Call payload.
ONE_CALL_EXCLUDE = "current,minutely,hourly,alerts"

DAYS = 3


class MalformedResponseError(ValueError):
    """Raised when an OpenWeatherMap response does not match the expected shape."""

    def __init__(self, endpoint: str, detail: str) -> None:
        super().__init__(f"Malformed response from {endpoint}: {detail}")
        self.endpoint = endpoint
        self.detail = detail


class _ProviderModel(BaseModel):
    model_config = ConfigDict(extra="ignore")


class GeoLocation(_ProviderModel):
    """Coordinates returned by the zip-code geocoding endpoint."""
    lat: float
    lon: float
    zip: Optional[str] = None
    name: Optional[str] = None
    country: Optional[str] = None


class WeatherCondition(_ProviderModel):
    main: str
    description: Optional[str] = None


class DailyTemperature(_ProviderModel):
    """Daily temperatures in Kelvin (the API default unit)."""
    min: float
    max: float
    morn: float
    eve: float
    day: Optional[float] = None
    night: Optional[float] = None


class DailyEntry(_ProviderModel):
    """One element of the One Call `daily` array."""
    dt: int
    temp: DailyTemperature
    humidity: int
    wind_speed: float
    clouds: int
    weather: List[WeatherCondition]


class OneCallResponse(_ProviderModel):
    lat: float
    lon: float
    timezone: Optional[str] = None
    daily: List[DailyEntry]


class ForecastDay(BaseModel):
    """Compact one-day summary handed to the narration step.

    Temperatures stay in Kelvin and wind speed in m/s; unit conversion is left
    to the language model.
    """
    date: datetime  # timezone-aware, UTC
    high: float
    low: float
    humidity: int
    morning_temp: float
    evening_temp: float
    wind_speed: float
    cloudiness: int
    conditions: List[str]

    @classmethod
    def from_daily_entry(cls, entry: DailyEntry) -> "ForecastDay":
        return cls(
            date=datetime.fromtimestamp(entry.dt, tz=timezone.utc),
            high=entry.temp.max,
            low=entry.temp.min,
            humidity=entry.humidity,
            morning_temp=entry.temp.morn,
            evening_temp=entry.temp.eve,
            wind_speed=entry.wind_speed,
            cloudiness=entry.clouds,
            conditions=[w.main for w in entry.weather],
        )


def _get_json(url: str, params: dict, *, timeout: float, context: str) -> object:
    """GET a provider endpoint and return the decoded JSON body."""
    logger.debug("GET %s", mask_url_secrets(f"{url}?{urlencode(params)}"))
    resp = session.get(url, params=params, timeout=timeout)
    resp.raise_for_status()
    try:
        return resp.json()
    except ValueError as exc:
        raise MalformedResponseError(context, "body is not JSON") from exc


def geocode_zip(
    zip_code: str | int,
    *,
    country: str = "US",
    settings: config.Settings | None = None,
) -> GeoLocation:
    """Resolve a zip code to latitude/longitude. The zip code is passed through unvalidated."""
    settings = settings or config.settings
    params = {
        "zip": f"{zip_code},{country}",
        "appid": settings.openweathermap_api_key,
    }
    data = _get_json(
        f"{settings.openweathermap_base_url}{GEOCODE_ZIP_PATH}",
        params,
        timeout=settings.request_timeout_seconds,
        context="geocode_zip",
    )
    try:
        location = GeoLocation.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError("geocode_zip", str(exc)) from exc

    logger.info("Resolved zip %s to lat=%s lon=%s (%s)", zip_code, location.lat, location.lon, location.name or "-")
    return location


def fetch_daily_forecast(
    latitude: float,
    longitude: float,
    *,
    settings: config.Settings | None = None,
) -> OneCallResponse:
    """Fetch the One Call daily forecast block for the given coordinates."""
    settings = settings or config.settings
    params = {
        "lat": latitude,
        "lon": longitude,
        "exclude": ONE_CALL_EXCLUDE,
        "appid": settings.openweathermap_api_key,
    }
    data = _get_json(
        f"{settings.openweathermap_base_url}{ONE_CALL_PATH}",
        params,
        timeout=settings.request_timeout_seconds,
        context="fetch_daily_forecast",
    )
    try:
        forecast = OneCallResponse.model_validate(data)
    except ValidationError as exc:
        raise MalformedResponseError("fetch_daily_forecast", str(exc)) from exc

    logger.info("Fetched %d daily entries for lat=%s lon=%s", len(forecast.daily), latitude, longitude)
    return forecast


def shape_forecast_days(daily: Sequence[DailyEntry], days: int = DAYS) -> List[ForecastDay]:
    """Convert the leading `days` entries into ForecastDay records, keeping provider order.

    Entries past the cutoff are dropped rather than kept as placeholders, so the
    result has min(len(daily), days) items.
    """
    out: List[ForecastDay] = []
    for idx, entry in enumerate(daily):
        if idx + 1 > days:
            break
        out.append(ForecastDay.from_daily_entry(entry))
    return out
