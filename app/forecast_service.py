"""Resolve a zip code and reduce its forecast to the days the report covers."""
from __future__ import annotations

from typing import List

from app import config
from app.data_sources import (
    DAYS,
    ForecastDay,
    fetch_daily_forecast,
    geocode_zip,
    shape_forecast_days,
)
from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="app/forecast_service")


def get_forecast_for_zip(
    zip_code: str | int,
    *,
    settings: config.Settings | None = None,
    days: int = DAYS,
) -> List[ForecastDay]:
    """
    Geocode `zip_code` (country fixed to US) and return up to `days` ForecastDay
    records, nearest day first.

    Network, HTTP and schema failures propagate to the caller unchanged.
    """
    settings = settings or config.settings
    location = geocode_zip(zip_code, country="US", settings=settings)
    forecast = fetch_daily_forecast(location.lat, location.lon, settings=settings)
    forecast_days = shape_forecast_days(forecast.daily, days=days)
    logger.info(
        "Prepared %d of %d forecast days for zip %s",
        len(forecast_days),
        len(forecast.daily),
        zip_code,
    )
    return forecast_days
