"""Clients for the OpenWeatherMap geocoding and forecast APIs."""

from .openweathermap_client import (
    DAYS,
    DailyEntry,
    ForecastDay,
    GeoLocation,
    MalformedResponseError,
    OneCallResponse,
    fetch_daily_forecast,
    geocode_zip,
    shape_forecast_days,
)

__all__ = [
    "DAYS",
    "DailyEntry",
    "ForecastDay",
    "GeoLocation",
    "MalformedResponseError",
    "OneCallResponse",
    "fetch_daily_forecast",
    "geocode_zip",
    "shape_forecast_days",
]
