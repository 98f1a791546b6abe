"""Factory helpers for building the upstream provider at startup."""

from __future__ import annotations

from app import config
from app.data_sources.base import WeatherProvider
from app.data_sources.openweather_client import OpenWeatherClient
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="data_sources/factory")


def build_provider(settings: config.Settings | None = None) -> WeatherProvider:
    """Instantiate the OpenWeather client from settings."""
    settings = settings or config.settings
    if not settings.openweather_api_key:
        logger.warning("OPENWEATHER_API_KEY is not set; weather lookups will fail until it is configured")
    logger.info(
        "Using OpenWeather provider",
        extra={"base_url": settings.openweather_base_url, "units": settings.units},
    )
    return OpenWeatherClient(
        settings.openweather_api_key,
        base_url=settings.openweather_base_url,
        units=settings.units,
        timeout=settings.upstream_timeout_seconds,
    )
