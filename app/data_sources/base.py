"""Interfaces and helpers for upstream weather providers."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Protocol


class WeatherProvider(Protocol):
    """Interface for anything that can return raw current/forecast payloads for a city."""

    def fetch_current(self, city: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Return the provider's current-weather body, unmodified."""
        ...

    def fetch_forecast(self, city: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Return the provider's 5-day/3-hour forecast body, unmodified."""
        ...


@dataclass
class CallableWeatherProvider(WeatherProvider):
    """Wrap two callables so they can be swapped for different backends."""

    current: Callable[..., Dict[str, Any]]
    forecast: Callable[..., Dict[str, Any]]

    def fetch_current(self, city: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Delegate to the configured current-weather callable."""
        return self.current(city, timeout=timeout)

    def fetch_forecast(self, city: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Delegate to the configured forecast callable."""
        return self.forecast(city, timeout=timeout)
