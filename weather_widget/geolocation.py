"""
Geolocation providers.

The browser owns navigator.geolocation; the page posts back either a
position or the reason it could not get one. SubmittedPosition replays
that outcome behind the same interface a test fake implements.
"""

from __future__ import annotations

from typing import Optional, Protocol

from .schemas import CoordinatesQuery, GeolocationFailure


class GeolocationError(Exception):
    def __init__(self, reason: GeolocationFailure):
        super().__init__(reason.message)
        self.reason = reason


class GeolocationProvider(Protocol):
    async def current_position(self) -> CoordinatesQuery:
        """Single-shot position request; raises GeolocationError on failure."""
        ...


class SubmittedPosition:
    """Outcome of a browser geolocation request, as posted by the page."""

    def __init__(
        self,
        lat: Optional[float] = None,
        lon: Optional[float] = None,
        failure: Optional[GeolocationFailure] = None,
    ):
        self.lat = lat
        self.lon = lon
        self.failure = failure

    async def current_position(self) -> CoordinatesQuery:
        if self.failure is not None:
            raise GeolocationError(self.failure)
        if self.lat is None or self.lon is None:
            # A browser that answered with neither a position nor an error
            raise GeolocationError(GeolocationFailure.UNSUPPORTED)
        return CoordinatesQuery(lat=self.lat, lon=self.lon)
