"""
View-model mapping.

Pure functions that reshape raw OpenWeather payloads into the frozen
schemas the page renders. Nothing here touches the network or the store.
"""

from __future__ import annotations

import math
from datetime import date, datetime, timedelta, timezone
from enum import Enum
from typing import Any, Dict, List, NamedTuple, Optional, Tuple, Union

from .schemas import AirQuality, ForecastEntry, WeatherSnapshot
from .weather_clients import WeatherError

MALFORMED_RESPONSE = "Unexpected response from weather service."


class ConditionGroup(str, Enum):
    CLEAR = "clear"
    CLOUD = "cloud"
    DRIZZLE = "drizzle"
    RAIN = "rain"
    SNOW = "snow"
    MIST = "mist"
    DEFAULT = "default"


class Condition(NamedTuple):
    group: ConditionGroup
    icon: str
    theme: str


# Keyed by the two-digit prefix of OpenWeather icon codes ("10d" -> "10").
CONDITION_PREFIXES: Dict[str, ConditionGroup] = {
    "01": ConditionGroup.CLEAR,
    "02": ConditionGroup.CLOUD,
    "03": ConditionGroup.CLOUD,
    "04": ConditionGroup.DRIZZLE,
    "09": ConditionGroup.RAIN,
    "10": ConditionGroup.RAIN,
    "13": ConditionGroup.SNOW,
    "50": ConditionGroup.MIST,
}

CONDITIONS: Dict[ConditionGroup, Condition] = {
    ConditionGroup.CLEAR: Condition(ConditionGroup.CLEAR, "clear.svg", "clear-bg"),
    ConditionGroup.CLOUD: Condition(ConditionGroup.CLOUD, "cloud.svg", "cloud-bg"),
    ConditionGroup.DRIZZLE: Condition(ConditionGroup.DRIZZLE, "drizzle.svg", "drizzle-bg"),
    ConditionGroup.RAIN: Condition(ConditionGroup.RAIN, "rain.svg", "rain-bg"),
    ConditionGroup.SNOW: Condition(ConditionGroup.SNOW, "snow.svg", "snow-bg"),
    # There is no dedicated mist artwork
    ConditionGroup.MIST: Condition(ConditionGroup.MIST, "cloud.svg", "mist-bg"),
    ConditionGroup.DEFAULT: Condition(ConditionGroup.DEFAULT, "clear.svg", "default-bg"),
}

AQI_LABELS: Dict[int, Tuple[str, str]] = {
    1: ("Good", "#4caf50"),
    2: ("Fair", "#8bc34a"),
    3: ("Moderate", "#ffc107"),
    4: ("Poor", "#ff9800"),
    5: ("Very Poor", "#f44336"),
}

MIDDAY = "12:00:00"


def classify(icon_code: Optional[str]) -> Condition:
    """Map an OpenWeather icon code to its icon/theme pair; unknown codes get DEFAULT."""
    if not icon_code:
        return CONDITIONS[ConditionGroup.DEFAULT]
    group = CONDITION_PREFIXES.get(icon_code[:2], ConditionGroup.DEFAULT)
    return CONDITIONS[group]


def floor_temperature(value: float) -> int:
    """Floor, never round: 21.9 -> 21, -0.6 -> -1."""
    return math.floor(value)


def location_time(instant: Union[int, float, datetime], offset_s: int) -> datetime:
    """
    Wall-clock time at the queried location.

    The result is UTC timestamp + location offset, returned as a naive
    datetime. The host's own timezone never enters the computation, so two
    viewers in different zones get the same answer for the same instant.
    """
    if isinstance(instant, datetime):
        if instant.tzinfo is None:
            raise ValueError("instant must be timezone-aware")
        ts = instant.timestamp()
    else:
        ts = float(instant)
    shifted = datetime.fromtimestamp(ts, tz=timezone.utc) + timedelta(seconds=offset_s)
    return shifted.replace(tzinfo=None)


def format_clock(instant: Union[int, float, datetime], offset_s: int) -> str:
    """12-hour clock at the location, e.g. "06:05 AM"."""
    return location_time(instant, offset_s).strftime("%I:%M %p")


def format_local_time(instant: Union[int, float, datetime], offset_s: int) -> str:
    """Weekday and 12-hour clock at the location, e.g. "Mon 03:15 PM"."""
    return location_time(instant, offset_s).strftime("%a %I:%M %p")


def to_snapshot(data: Dict[str, Any], now: datetime) -> WeatherSnapshot:
    """Reshape a /data/2.5/weather payload; `now` is the fetch instant (aware)."""
    try:
        main = data["main"]
        sys = data.get("sys") or {}
        conditions = (data.get("weather") or [{}])[0]
        offset = int(data.get("timezone", 0))
        icon_code = conditions.get("icon", "")
        condition = classify(icon_code)

        visibility = data.get("visibility")
        return WeatherSnapshot(
            temperature=floor_temperature(main["temp"]),
            temp_min=floor_temperature(main["temp_min"]),
            temp_max=floor_temperature(main["temp_max"]),
            feels_like=floor_temperature(main["feels_like"]),
            humidity=main["humidity"],
            wind_speed=(data.get("wind") or {}).get("speed", 0.0),
            pressure=main["pressure"],
            visibility_km=f"{visibility / 1000:.1f}" if visibility is not None else None,
            location=data["name"],
            country=sys.get("country", ""),
            description=conditions.get("description", ""),
            icon=condition.icon,
            icon_code=icon_code,
            theme=condition.theme,
            sunrise=format_clock(sys["sunrise"], offset),
            sunset=format_clock(sys["sunset"], offset),
            local_time=format_local_time(now, offset),
            lat=data["coord"]["lat"],
            lon=data["coord"]["lon"],
        )
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        raise WeatherError(MALFORMED_RESPONSE) from e


def to_air_quality(data: Dict[str, Any]) -> Optional[AirQuality]:
    """First reading's AQI bucket, or None if the payload has no usable reading."""
    try:
        readings = data.get("list") or []
        if not readings:
            return None
        index = (readings[0].get("main") or {}).get("aqi")
        if not isinstance(index, int):
            return None
    except AttributeError as e:
        raise WeatherError(MALFORMED_RESPONSE) from e
    if index not in AQI_LABELS:
        return None
    label, color = AQI_LABELS[index]
    return AirQuality(index=index, label=label, color=color)


def select_midday(items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep the 12:00:00 reading of each calendar day, at most one per day, in response order."""
    seen: set = set()
    out: List[Dict[str, Any]] = []
    for item in items:
        dt_txt = item.get("dt_txt") or ""
        day, _, clock = dt_txt.partition(" ")
        if clock != MIDDAY or day in seen:
            continue
        seen.add(day)
        out.append(item)
    return out


def to_forecast(data: Dict[str, Any]) -> Tuple[ForecastEntry, ...]:
    """Reshape a /data/2.5/forecast payload into one entry per day."""
    items = data.get("list") if isinstance(data, dict) else None
    if not isinstance(items, list):
        raise WeatherError(MALFORMED_RESPONSE)

    entries = []
    try:
        midday = select_midday(items)
        for item in midday:
            d = date.fromisoformat(item["dt_txt"].split(" ")[0])
            icon_code = (item.get("weather") or [{}])[0].get("icon", "")
            entries.append(ForecastEntry(
                date=d,
                day=d.strftime("%a"),
                icon=classify(icon_code).icon,
                icon_code=icon_code,
                temperature=floor_temperature(item["main"]["temp"]),
            ))
    except (AttributeError, KeyError, IndexError, TypeError, ValueError) as e:
        raise WeatherError(MALFORMED_RESPONSE) from e
    return tuple(entries)
