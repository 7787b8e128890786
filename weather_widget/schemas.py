"""
Pydantic schemas.

Everything the page renders lives in one frozen ViewState. The session
replaces it wholesale on every transition instead of mutating fields.
"""

from __future__ import annotations

from datetime import date
from enum import Enum
from typing import Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field


class Unit(str, Enum):
    METRIC = "metric"
    IMPERIAL = "imperial"

    @property
    def temperature_symbol(self) -> str:
        return "°C" if self is Unit.METRIC else "°F"

    @property
    def wind_speed_symbol(self) -> str:
        return "m/s" if self is Unit.METRIC else "mph"

    def toggled(self) -> "Unit":
        return Unit.IMPERIAL if self is Unit.METRIC else Unit.METRIC


class CityQuery(BaseModel):
    """Lookup by the name the user typed."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["city"] = "city"
    name: str = Field(..., min_length=1, max_length=255)


class CoordinatesQuery(BaseModel):
    """Lookup by device coordinates."""
    model_config = ConfigDict(frozen=True)

    kind: Literal["coords"] = "coords"
    lat: float = Field(..., ge=-90.0, le=90.0)
    lon: float = Field(..., ge=-180.0, le=180.0)


Query = Union[CityQuery, CoordinatesQuery]


class WeatherSnapshot(BaseModel):
    """Current conditions for one location at one fetch instant."""
    model_config = ConfigDict(frozen=True)

    temperature: int
    temp_min: int
    temp_max: int
    feels_like: int
    humidity: int
    wind_speed: float
    pressure: int
    # "10.0" style, one decimal; None when the API omits visibility
    visibility_km: Optional[str] = None
    location: str
    country: str = ""
    description: str = ""
    icon: str
    icon_code: str = ""
    theme: str
    sunrise: str
    sunset: str
    local_time: str
    lat: float
    lon: float


class AirQuality(BaseModel):
    """AQI bucket 1 (best) to 5 (worst) with its display label and color."""
    model_config = ConfigDict(frozen=True)

    index: int = Field(..., ge=1, le=5)
    label: str
    color: str


class ForecastEntry(BaseModel):
    """One future day's midday reading."""
    model_config = ConfigDict(frozen=True)

    date: date
    day: str
    icon: str
    icon_code: str = ""
    temperature: int


class ViewStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


class ViewState(BaseModel):
    """
    Immutable view model owned by the presentation layer.

    snapshot/aqi/forecast always originate from the same query.
    """
    model_config = ConfigDict(frozen=True)

    status: ViewStatus = ViewStatus.IDLE
    error: Optional[str] = None
    snapshot: Optional[WeatherSnapshot] = None
    aqi: Optional[AirQuality] = None
    forecast: Tuple[ForecastEntry, ...] = ()
    unit: Unit = Unit.METRIC
    # True between the snapshot landing and air quality/forecast landing
    secondary_pending: bool = False

    @classmethod
    def idle(cls, unit: Unit = Unit.METRIC) -> "ViewState":
        return cls(status=ViewStatus.IDLE, unit=unit)

    def loading(self) -> "ViewState":
        """New fetch in flight: all weather data is cleared."""
        return ViewState(status=ViewStatus.LOADING, unit=self.unit)

    def failed(self, message: str) -> "ViewState":
        """Primary fetch failure: clears snapshot, aqi and forecast."""
        return ViewState(status=ViewStatus.ERROR, error=message, unit=self.unit)

    def with_error(self, message: str) -> "ViewState":
        """Error that keeps whatever weather data is currently displayed."""
        return self.model_copy(update={"status": ViewStatus.ERROR, "error": message})


class GeolocationFailure(str, Enum):
    PERMISSION_DENIED = "denied"
    UNSUPPORTED = "unsupported"

    @property
    def message(self) -> str:
        if self is GeolocationFailure.PERMISSION_DENIED:
            return "Location permission denied."
        return "Geolocation not supported by this browser."


class GeolocationIn(BaseModel):
    """Browser geolocation outcome: a position, or the reason there is none."""
    lat: Optional[float] = Field(None, ge=-90.0, le=90.0)
    lon: Optional[float] = Field(None, ge=-180.0, le=180.0)
    error: Optional[GeolocationFailure] = None


class StateOut(BaseModel):
    """JSON representation of the page: view state + recent searches."""
    state: ViewState
    recent_searches: Tuple[str, ...] = ()
