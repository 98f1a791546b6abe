"""Pydantic records shared by the normalizer, orchestrator and HTTP layer."""

from typing import Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict


Number = Union[int, float]


class _Record(BaseModel):
    """Immutable value object; records are never mutated after construction."""
    model_config = ConfigDict(frozen=True)


class CurrentWeatherRecord(_Record):
    """Normalized current conditions for a single city."""
    city: str
    country: Optional[str] = None
    temperature: Number
    feels_like: Number
    humidity: Number
    pressure: Number
    wind_speed: Number
    wind_direction: Number = 0
    description: str
    icon: str
    clouds: Optional[Number] = None
    visibility: Number = 0
    timestamp: str
    sunrise: Optional[str] = None
    sunset: Optional[str] = None


class ForecastEntry(_Record):
    """One 3-hour slot of the 5-day forecast."""
    datetime: str
    temperature: Number
    feels_like: Number
    temp_min: Number
    temp_max: Number
    humidity: Number
    pressure: Number
    wind_speed: Number
    description: str
    icon: str
    clouds: Optional[Number] = None
    pop: Number = 0


class ForecastRecord(_Record):
    """Normalized multi-day forecast; entries keep the provider's order."""
    city: str
    country: Optional[str] = None
    forecast: list[ForecastEntry]
    timestamp: str


class CitySummary(_Record):
    """Reduced projection of current conditions for the popular-cities view."""
    city: str
    country: Optional[str] = None
    temperature: Number
    description: str
    icon: str
    humidity: Number
    wind_speed: Number


class Alert(_Record):
    """Threshold violation computed per request."""
    type: Literal["heat", "cold", "wind"]
    severity: Literal["high", "medium"]
    message: str


class AlertRequest(BaseModel):
    """Incoming alert-check payload. ``email`` is accepted but unused."""
    city: Optional[str] = None
    email: Optional[str] = None


class AlertsResponse(BaseModel):
    """Alerts computed for a city."""
    city: str
    alerts: list[Alert]
    alert_count: int


class HistoryResponse(BaseModel):
    """Stored queries for a city, most recent first."""
    city: str
    count: int
    history: list[dict[str, Any]]
    message: Optional[str] = None


class CitiesResponse(BaseModel):
    """Popular-cities aggregate."""
    cities: list[CitySummary]


class ServiceInfo(BaseModel):
    """Metadata served at the root path."""
    message: str
    status: str
    version: str
    endpoints: list[str]
