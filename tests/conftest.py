"""Pytest configuration and fixtures."""

import os
import tempfile
from datetime import datetime, timezone

import pytest
import respx

# Set test environment variables before importing the app
os.environ.setdefault("OPENWEATHER_API_KEY", "test-weather-key")
os.environ.setdefault("SQLITE_PATH", os.path.join(tempfile.mkdtemp(), "test.sqlite3"))
os.environ.setdefault("DEFAULT_CITY", "")

from weather_widget.kv_store import InMemoryKeyValueStore  # noqa: E402
from weather_widget.recent_searches import RecentSearchStore  # noqa: E402
from weather_widget.session import WeatherSession  # noqa: E402
from weather_widget.weather_clients import OpenWeatherClient  # noqa: E402

BASE_URL = "https://owm.test"
# Monday 2024-01-15 12:00 UTC
FIXED_NOW = datetime(2024, 1, 15, 12, 0, tzinfo=timezone.utc)


def current_payload(name="Paris", temp=21.9, icon="01d", tz=7200, lat=48.85, lon=2.35, country="FR"):
    """Shape of /data/2.5/weather."""
    return {
        "cod": 200,
        "name": name,
        "timezone": tz,
        "visibility": 10000,
        "coord": {"lat": lat, "lon": lon},
        "weather": [{"icon": icon, "description": "clear sky"}],
        "main": {
            "temp": temp,
            "temp_min": 19.4,
            "temp_max": 23.1,
            "feels_like": 21.5,
            "humidity": 40,
            "pressure": 1012,
        },
        "wind": {"speed": 3.6},
        # 2023-11-14 22:13:20 UTC / 2023-11-15 08:00:00 UTC
        "sys": {"country": country, "sunrise": 1700000000, "sunset": 1700035200},
    }


def air_payload(aqi=2):
    """Shape of /data/2.5/air_pollution."""
    return {"coord": {"lat": 48.85, "lon": 2.35}, "list": [{"main": {"aqi": aqi}, "dt": 1705320000}]}


def forecast_payload():
    """Shape of /data/2.5/forecast: three days of 3-hour readings."""
    items = []
    for day, temp in (("2024-01-16", 5.7), ("2024-01-17", -0.6), ("2024-01-18", 12.99)):
        for clock, icon in (("09:00:00", "04d"), ("12:00:00", "10d"), ("15:00:00", "01d")):
            items.append({
                "dt_txt": f"{day} {clock}",
                "main": {"temp": temp},
                "weather": [{"icon": icon}],
            })
    return {"cod": "200", "list": items, "city": {"timezone": 7200}}


class FakeWeatherClient:
    """Stands in for OpenWeatherClient; records calls and returns canned payloads."""

    def __init__(self):
        self.calls = []
        self.payloads = {}

    async def current_weather(self, query, units):
        self.calls.append(("weather", query, units))
        name = getattr(query, "name", "Here")
        return self.payloads.get(name) or current_payload(name=name)

    async def air_pollution(self, lat, lon):
        self.calls.append(("air", lat, lon))
        return air_payload()

    async def forecast_5day_3h(self, lat, lon, units):
        self.calls.append(("forecast", lat, lon, units))
        return forecast_payload()


@pytest.fixture
def owm() -> OpenWeatherClient:
    return OpenWeatherClient("test-weather-key", timeout_s=1.0, base=BASE_URL)


@pytest.fixture
def api():
    """respx router mounted on the test base URL."""
    with respx.mock(base_url=BASE_URL, assert_all_called=False) as mock:
        yield mock


@pytest.fixture
def kv() -> InMemoryKeyValueStore:
    return InMemoryKeyValueStore()


@pytest.fixture
def recent(kv) -> RecentSearchStore:
    return RecentSearchStore(kv)


@pytest.fixture
def session(owm, recent) -> WeatherSession:
    return WeatherSession(owm, recent, clock=lambda: FIXED_NOW)


@pytest.fixture
def fake_client() -> FakeWeatherClient:
    return FakeWeatherClient()


@pytest.fixture
def fake_session(fake_client, recent) -> WeatherSession:
    return WeatherSession(fake_client, recent, clock=lambda: FIXED_NOW)
