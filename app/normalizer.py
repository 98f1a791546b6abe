"""Map raw OpenWeather payloads onto the service's stable record shapes."""
from __future__ import annotations

import datetime as dt
from typing import Any, Mapping

from app.errors import NormalizationError
from app.models import CitySummary, CurrentWeatherRecord, ForecastEntry, ForecastRecord

_EPOCH = dt.datetime(1970, 1, 1, tzinfo=dt.timezone.utc)


def to_iso(value: dt.datetime) -> str:
    """Format an aware datetime as UTC ISO-8601 with millisecond precision and a ``Z`` suffix."""
    value = value.astimezone(dt.timezone.utc)
    return value.strftime("%Y-%m-%dT%H:%M:%S.") + f"{value.microsecond // 1000:03d}Z"


def utc_now_iso() -> str:
    """Current instant in the record timestamp format."""
    return to_iso(dt.datetime.now(dt.timezone.utc))


def epoch_seconds_to_iso(seconds: float | int | None) -> str | None:
    """Convert provider epoch seconds to ISO-8601 via milliseconds (``seconds * 1000``)."""
    if seconds is None:
        return None
    millis = int(round(seconds * 1000))
    return to_iso(_EPOCH + dt.timedelta(milliseconds=millis))


def _section(payload: Mapping[str, Any], key: str, *, context: str) -> Mapping[str, Any]:
    """Return a mandatory nested object."""
    value = payload.get(key) if isinstance(payload, Mapping) else None
    if not isinstance(value, Mapping):
        raise NormalizationError(f"Malformed {context} payload: missing '{key}'")
    return value


def _required(section: Mapping[str, Any], key: str, *, context: str) -> Any:
    """Return a mandatory scalar; absence is an error, never a null."""
    value = section.get(key)
    if value is None:
        raise NormalizationError(f"Malformed {context} payload: missing '{key}'")
    return value


def _condition(payload: Mapping[str, Any], *, context: str) -> Mapping[str, Any]:
    """Return the first weather-condition entry; description and icon are never substituted."""
    conditions = payload.get("weather")
    if not isinstance(conditions, list) or not conditions or not isinstance(conditions[0], Mapping):
        raise NormalizationError(f"Malformed {context} payload: missing weather condition")
    first = conditions[0]
    _required(first, "description", context=context)
    _required(first, "icon", context=context)
    return first


def normalize_current(payload: Mapping[str, Any], *, timestamp: str | None = None) -> CurrentWeatherRecord:
    """Build a CurrentWeatherRecord from a ``/weather`` body.

    ``wind.deg`` and ``visibility`` fall back to 0 when missing. ``timestamp`` is the
    retrieval time and defaults to now.
    """
    ctx = "current weather"
    main = _section(payload, "main", context=ctx)
    wind = _section(payload, "wind", context=ctx)
    sys_ = payload.get("sys") or {}
    clouds = payload.get("clouds") or {}
    condition = _condition(payload, context=ctx)

    return CurrentWeatherRecord(
        city=_required(payload, "name", context=ctx),
        country=sys_.get("country"),
        temperature=_required(main, "temp", context=ctx),
        feels_like=_required(main, "feels_like", context=ctx),
        humidity=_required(main, "humidity", context=ctx),
        pressure=_required(main, "pressure", context=ctx),
        wind_speed=_required(wind, "speed", context=ctx),
        wind_direction=wind.get("deg") or 0,
        description=condition["description"],
        icon=condition["icon"],
        clouds=clouds.get("all"),
        visibility=payload.get("visibility") or 0,
        timestamp=timestamp or utc_now_iso(),
        sunrise=epoch_seconds_to_iso(sys_.get("sunrise")),
        sunset=epoch_seconds_to_iso(sys_.get("sunset")),
    )


def _normalize_entry(item: Mapping[str, Any]) -> ForecastEntry:
    """Build one ForecastEntry; ``pop`` is scaled from a 0-1 fraction to a percentage."""
    ctx = "forecast entry"
    main = _section(item, "main", context=ctx)
    wind = _section(item, "wind", context=ctx)
    clouds = item.get("clouds") or {}
    condition = _condition(item, context=ctx)

    return ForecastEntry(
        datetime=_required(item, "dt_txt", context=ctx),
        temperature=_required(main, "temp", context=ctx),
        feels_like=_required(main, "feels_like", context=ctx),
        temp_min=_required(main, "temp_min", context=ctx),
        temp_max=_required(main, "temp_max", context=ctx),
        humidity=_required(main, "humidity", context=ctx),
        pressure=_required(main, "pressure", context=ctx),
        wind_speed=_required(wind, "speed", context=ctx),
        description=condition["description"],
        icon=condition["icon"],
        clouds=clouds.get("all"),
        pop=(item.get("pop") or 0) * 100,
    )


def normalize_forecast(payload: Mapping[str, Any], *, timestamp: str | None = None) -> ForecastRecord:
    """Build a ForecastRecord from a ``/forecast`` body, keeping entry order as delivered."""
    ctx = "forecast"
    city = _section(payload, "city", context=ctx)
    items = payload.get("list")
    if not isinstance(items, list):
        raise NormalizationError("Malformed forecast payload: missing 'list'")

    return ForecastRecord(
        city=_required(city, "name", context=ctx),
        country=city.get("country"),
        forecast=[_normalize_entry(item) for item in items],
        timestamp=timestamp or utc_now_iso(),
    )


def to_city_summary(record: CurrentWeatherRecord) -> CitySummary:
    """Project a current-weather record onto the popular-cities shape."""
    return CitySummary(
        city=record.city,
        country=record.country,
        temperature=record.temperature,
        description=record.description,
        icon=record.icon,
        humidity=record.humidity,
        wind_speed=record.wind_speed,
    )
