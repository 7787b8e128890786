"""
Fetch orchestration for one widget.

A WeatherSession owns the current ViewState and drives every transition:

    idle/ready/error --(query)--> loading --(primary ok)--> ready
    loading --(primary or network failure)--> error

Each fetch takes a sequence number. Whatever a fetch produces is only
applied while its number is still the latest issued, so a slow earlier
request can never overwrite the result of a later one.
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Optional, Tuple

import httpx

from .geolocation import GeolocationError, GeolocationProvider
from .mappers import to_air_quality, to_forecast, to_snapshot
from .recent_searches import RecentSearchStore
from .schemas import CityQuery, CoordinatesQuery, Query, Unit, ViewState, ViewStatus
from .weather_clients import OpenWeatherClient, WeatherError

logger = logging.getLogger(__name__)

NETWORK_ERROR = "Network error"


class WeatherSession:
    def __init__(
        self,
        client: OpenWeatherClient,
        recent: RecentSearchStore,
        unit: Unit = Unit.METRIC,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self.client = client
        self.recent = recent
        self.clock = clock or (lambda: datetime.now(timezone.utc))
        self.state = ViewState.idle(unit)
        self.last_query: Optional[Query] = None
        self._record_history = False
        self._seq = 0

    @property
    def recent_searches(self) -> Tuple[str, ...]:
        return self.recent.entries

    async def start(self, default_city: str = "") -> ViewState:
        """Load persisted history, then look up the default city if one is configured."""
        self.recent.load()
        if default_city:
            return await self.search_city(default_city)
        return self.state

    async def search_city(self, name: str) -> ViewState:
        name = name.strip()
        if not name:
            return self.state
        return await self.fetch(CityQuery(name=name), record_history=True)

    async def search_coordinates(self, lat: float, lon: float) -> ViewState:
        return await self.fetch(CoordinatesQuery(lat=lat, lon=lon), record_history=False)

    async def use_current_location(self, provider: GeolocationProvider) -> ViewState:
        """
        Ask the provider for a position and look it up.

        A denied or unavailable position only sets the error message; the
        weather currently on screen is left as it is.
        """
        try:
            query = await provider.current_position()
        except GeolocationError as e:
            logger.info("Geolocation unavailable: %s", e.reason.value)
            self.state = self.state.with_error(e.reason.message)
            return self.state
        return await self.fetch(query, record_history=False)

    async def toggle_unit(self) -> ViewState:
        """
        Flip metric/imperial; the weather on screen (also when it sits under
        a geolocation error) is re-fetched once in the new unit.
        """
        in_flight = self.state.status is ViewStatus.LOADING
        refetch = (
            (self.state.snapshot is not None or in_flight)
            and self.last_query is not None
        )
        self.state = self.state.model_copy(update={"unit": self.state.unit.toggled()})
        if not refetch:
            return self.state
        # A superseded city search still owes its history entry
        record_history = self._record_history if in_flight else False
        return await self.fetch(self.last_query, record_history=record_history)

    def _is_current(self, seq: int) -> bool:
        if seq != self._seq:
            logger.info("Discarding stale weather response #%d (latest is #%d)", seq, self._seq)
            return False
        return True

    async def fetch(self, query: Query, record_history: bool = False) -> ViewState:
        """
        Current weather first; air quality and forecast then run concurrently
        with the coordinates it returned.

        Only a primary failure or a network failure reaches the error state.
        Other secondary failures just leave their section empty.
        """
        self._seq += 1
        seq = self._seq
        unit = self.state.unit
        self.last_query = query
        self._record_history = record_history
        self.state = self.state.loading()

        try:
            raw = await self.client.current_weather(query, unit)
            snapshot = to_snapshot(raw, self.clock())
        except httpx.RequestError:
            logger.warning("Current weather request failed for %r", query, exc_info=True)
            return self._fail(seq, NETWORK_ERROR)
        except WeatherError as e:
            logger.info("Current weather rejected for %r: %s", query, e)
            return self._fail(seq, str(e))

        if not self._is_current(seq):
            return self.state

        self.state = ViewState(
            status=ViewStatus.READY,
            snapshot=snapshot,
            unit=unit,
            secondary_pending=True,
        )
        if record_history:
            self.recent.record(snapshot.location)

        aqi_result, forecast_result = await asyncio.gather(
            self.client.air_pollution(snapshot.lat, snapshot.lon),
            self.client.forecast_5day_3h(snapshot.lat, snapshot.lon, unit),
            return_exceptions=True,
        )
        if not self._is_current(seq):
            return self.state

        try:
            aqi = self._secondary("air quality", aqi_result, to_air_quality)
            forecast = self._secondary("forecast", forecast_result, to_forecast)
        except httpx.RequestError:
            logger.warning("Secondary request failed for %r", query, exc_info=True)
            return self._fail(seq, NETWORK_ERROR)

        self.state = self.state.model_copy(update={
            "aqi": aqi,
            "forecast": forecast if forecast is not None else (),
            "secondary_pending": False,
        })
        return self.state

    def _fail(self, seq: int, message: str) -> ViewState:
        if self._is_current(seq):
            self.state = self.state.failed(message)
        return self.state

    @staticmethod
    def _secondary(label: str, result: Any, mapper: Callable[[Any], Any]) -> Any:
        """Map a gathered result; network errors are re-raised, anything else degrades to None."""
        if isinstance(result, httpx.RequestError):
            raise result
        if isinstance(result, BaseException):
            if not isinstance(result, Exception):
                raise result
            logger.warning("Omitting %s: %s", label, result)
            return None
        try:
            return mapper(result)
        except WeatherError as e:
            logger.warning("Omitting %s: %s", label, e)
            return None
