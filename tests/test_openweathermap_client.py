import datetime as dt
import unittest

import requests

from app.config import Settings
from app.data_sources import openweathermap_client
from app.data_sources.openweathermap_client import (
    DAYS,
    DailyEntry,
    MalformedResponseError,
    fetch_daily_forecast,
    geocode_zip,
    shape_forecast_days,
)


class DummyResp:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


class RecordingSession:
    def __init__(self, *responses):
        self._responses = list(responses)
        self.calls = []

    def get(self, url, params=None, timeout=None):
        self.calls.append({"url": url, "params": params, "timeout": timeout})
        return self._responses.pop(0)


def _daily_entry(day: int):
    return {
        "dt": 1704110400 + day * 86400,  # 2024-01-01T12:00:00Z + day
        "sunrise": 1704096000,
        "temp": {"day": 275.0, "min": 270.0 + day, "max": 280.0 + day, "night": 271.0, "eve": 276.0, "morn": 272.0},
        "feels_like": {"day": 273.0},
        "pressure": 1012,
        "humidity": 60 + day,
        "wind_speed": 3.5 + day,
        "weather": [{"id": 500, "main": "Rain", "description": "light rain", "icon": "10d"},
                    {"id": 803, "main": "Clouds", "description": "broken clouds", "icon": "04d"}],
        "clouds": 75,
        "pop": 0.4,
    }


def _forecast_payload(n_days: int):
    return {
        "lat": 40.0,
        "lon": -75.0,
        "timezone": "America/New_York",
        "timezone_offset": -18000,
        "daily": [_daily_entry(i) for i in range(n_days)],
    }


def _settings():
    return Settings(
        openweathermap_api_key="owm-key",
        openai_api_key="oa-key",
        openweathermap_base_url="https://owm.test/",
    )


class TestOpenWeatherMapClient(unittest.TestCase):
    def setUp(self):
        self._orig_session = openweathermap_client.session

    def tearDown(self):
        openweathermap_client.session = self._orig_session

    def test_geocode_zip_sends_zip_with_country(self):
        fake = RecordingSession(DummyResp({"zip": "19104", "name": "Philadelphia", "lat": 40.0, "lon": -75.0, "country": "US"}))
        openweathermap_client.session = fake

        loc = geocode_zip("19104", settings=_settings())

        self.assertEqual((loc.lat, loc.lon), (40.0, -75.0))
        call = fake.calls[0]
        self.assertEqual(call["url"], "https://owm.test/geo/1.0/zip")
        self.assertEqual(call["params"]["zip"], "19104,US")
        self.assertEqual(call["params"]["appid"], "owm-key")
        self.assertEqual(call["timeout"], 10.0)

    def test_fetch_daily_forecast_uses_coordinates(self):
        fake = RecordingSession(DummyResp(_forecast_payload(8)))
        openweathermap_client.session = fake

        forecast = fetch_daily_forecast(40.0, -75.0, settings=_settings())

        self.assertEqual(len(forecast.daily), 8)
        call = fake.calls[0]
        self.assertEqual(call["url"], "https://owm.test/data/3.0/onecall")
        self.assertEqual(call["params"]["lat"], 40.0)
        self.assertEqual(call["params"]["lon"], -75.0)
        self.assertIn("hourly", call["params"]["exclude"])
        self.assertNotIn("daily", call["params"]["exclude"])

    def test_http_error_propagates(self):
        openweathermap_client.session = RecordingSession(DummyResp({"cod": 401, "message": "Invalid API key"}, 401))
        with self.assertRaises(requests.HTTPError):
            geocode_zip("19104", settings=_settings())

    def test_missing_field_is_malformed_response(self):
        openweathermap_client.session = RecordingSession(DummyResp({"name": "Nowhere"}))
        with self.assertRaises(MalformedResponseError) as ctx:
            geocode_zip("00000", settings=_settings())
        self.assertEqual(ctx.exception.endpoint, "geocode_zip")

    def test_non_json_body_is_malformed_response(self):
        openweathermap_client.session = RecordingSession(DummyResp(ValueError("no json")))
        with self.assertRaises(MalformedResponseError):
            fetch_daily_forecast(1.0, 2.0, settings=_settings())

    def test_daily_shape_mismatch_is_malformed_response(self):
        payload = _forecast_payload(2)
        del payload["daily"][1]["temp"]
        openweathermap_client.session = RecordingSession(DummyResp(payload))
        with self.assertRaises(MalformedResponseError):
            fetch_daily_forecast(1.0, 2.0, settings=_settings())


class TestShapeForecastDays(unittest.TestCase):
    def _entries(self, n):
        return [DailyEntry.model_validate(_daily_entry(i)) for i in range(n)]

    def test_keeps_first_days_in_order(self):
        days = shape_forecast_days(self._entries(8))
        self.assertEqual(len(days), DAYS)
        self.assertEqual([d.high for d in days], [280.0, 281.0, 282.0])

    def test_short_input_is_not_padded(self):
        days = shape_forecast_days(self._entries(2))
        self.assertEqual(len(days), 2)
        self.assertTrue(all(d is not None for d in days))

    def test_empty_input(self):
        self.assertEqual(shape_forecast_days([]), [])

    def test_field_mapping(self):
        day = shape_forecast_days(self._entries(1))[0]
        self.assertEqual(day.date, dt.datetime(2024, 1, 1, 12, tzinfo=dt.timezone.utc))
        self.assertEqual(day.low, 270.0)
        self.assertEqual(day.high, 280.0)
        self.assertEqual(day.morning_temp, 272.0)
        self.assertEqual(day.evening_temp, 276.0)
        self.assertEqual(day.humidity, 60)
        self.assertEqual(day.wind_speed, 3.5)
        self.assertEqual(day.cloudiness, 75)
        self.assertEqual(day.conditions, ["Rain", "Clouds"])

    def test_custom_cutoff(self):
        self.assertEqual(len(shape_forecast_days(self._entries(5), days=1)), 1)


if __name__ == "__main__":
    unittest.main()
