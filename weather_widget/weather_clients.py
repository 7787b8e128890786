"""
Weather clients.

API logic is kept apart from the FastAPI endpoints and from the session
so each can be tested in isolation.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from .schemas import CityQuery, Query, Unit

logger = logging.getLogger(__name__)


class WeatherError(RuntimeError):
    """Raised for user-facing weather lookup failures."""
    pass


def _status_of(data: Dict[str, Any]) -> Optional[int]:
    # OpenWeather reports "cod" as 200 on success but as a string ("404") on errors
    cod = data.get("cod")
    try:
        return int(cod)
    except (TypeError, ValueError):
        return None


class OpenWeatherClient:
    """
    OpenWeatherMap wrapper.

    Endpoints used:
    - Current weather:
        /data/2.5/weather?q=...&units=metric&appid=KEY
        /data/2.5/weather?lat=...&lon=...&units=metric&appid=KEY
    - Air pollution:
        /data/2.5/air_pollution?lat=...&lon=...&appid=KEY
    - 5-day forecast (3-hour increments):
        /data/2.5/forecast?lat=...&lon=...&units=metric&appid=KEY

    Network failures are not wrapped: httpx.RequestError propagates so the
    caller can tell "the service said no" apart from "we never reached it".
    """

    def __init__(self, api_key: str, timeout_s: float = 10.0, base: str = "https://api.openweathermap.org"):
        self.api_key = api_key
        self.timeout_s = timeout_s
        self.base = base.rstrip("/")

    async def _get(self, path: str, params: Dict[str, Any]) -> httpx.Response:
        params = {**params, "appid": self.api_key}
        logger.debug("GET %s %s", path, {k: v for k, v in params.items() if k != "appid"})
        async with httpx.AsyncClient(timeout=self.timeout_s) as client:
            return await client.get(f"{self.base}{path}", params=params)

    async def current_weather(self, query: Query, units: Unit = Unit.METRIC) -> Dict[str, Any]:
        """
        Retrieves current weather conditions for a city name or a lat/lon pair.

        A non-success status, either on the response or in the body's "cod"
        field, raises WeatherError carrying the API's own message.
        """
        params: Dict[str, Any] = {"units": units.value}
        if isinstance(query, CityQuery):
            params["q"] = query.name
            default_message = "City not found."
        else:
            params["lat"] = query.lat
            params["lon"] = query.lon
            default_message = "Location not found."

        r = await self._get("/data/2.5/weather", params)
        try:
            data = r.json()
        except ValueError:
            raise WeatherError(f"Current weather failed ({r.status_code}).")

        if not isinstance(data, dict):
            raise WeatherError(default_message)
        if r.status_code != 200 or _status_of(data) != 200:
            raise WeatherError(data.get("message") or default_message)
        return data

    async def air_pollution(self, lat: float, lon: float) -> Dict[str, Any]:
        """Retrieves the current air pollution reading (AQI bucket) for a lat/lon."""
        r = await self._get("/data/2.5/air_pollution", {"lat": lat, "lon": lon})
        if r.status_code != 200:
            raise WeatherError(f"Air pollution failed ({r.status_code}): {r.text}")
        return r.json()

    async def forecast_5day_3h(self, lat: float, lon: float, units: Unit = Unit.METRIC) -> Dict[str, Any]:
        """
        Retrieves the 5-day forecast in 3-hour increments.
        The mapper later keeps only the midday reading of each day.
        """
        r = await self._get("/data/2.5/forecast", {"lat": lat, "lon": lon, "units": units.value})
        if r.status_code != 200:
            raise WeatherError(f"Forecast failed ({r.status_code}): {r.text}")
        return r.json()
