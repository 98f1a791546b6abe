"""Upstream weather providers and the factory that picks one."""

from .base import CallableWeatherProvider, WeatherProvider
from .factory import build_provider
from .openweather_client import OpenWeatherClient

__all__ = [
    "build_provider",
    "CallableWeatherProvider",
    "OpenWeatherClient",
    "WeatherProvider",
]
