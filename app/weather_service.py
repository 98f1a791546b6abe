"""Orchestrate provider lookups, normalization, alerts and history for the HTTP layer."""
from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor, wait
from typing import List, Optional, Sequence

from app import alerts
from app.config import Settings
from app.data_sources.base import WeatherProvider
from app.errors import InvalidParameterError, MissingParameterError, UpstreamError
from app.history_store import HistoryStore
from app.models import (
    AlertsResponse,
    CitiesResponse,
    CitySummary,
    CurrentWeatherRecord,
    ForecastRecord,
    HistoryResponse,
)
from app.normalizer import normalize_current, normalize_forecast, to_city_summary
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/weather_service")

CITY_REQUIRED = "City parameter is required"
DATABASE_UNAVAILABLE = "Database not available"


def _require_city(city: Optional[str], message: str = CITY_REQUIRED) -> str:
    """Return the stripped city or raise a 400."""
    if city is None or not str(city).strip():
        raise MissingParameterError(message)
    return str(city).strip()


class WeatherService:
    """Stateless request orchestration over an injected provider and history store."""

    def __init__(self, provider: WeatherProvider, store: HistoryStore, settings: Settings) -> None:
        self.provider = provider
        self.store = store
        self.settings = settings

    def get_current(self, city: Optional[str]) -> CurrentWeatherRecord:
        """Fetch, normalize and (best-effort) record current conditions."""
        city = _require_city(city)
        payload = self.provider.fetch_current(city)
        record = normalize_current(payload)
        self._record(self.store.record_current, record)
        return record

    def get_forecast(self, city: Optional[str]) -> ForecastRecord:
        """Fetch, normalize and (best-effort) record the 5-day forecast."""
        city = _require_city(city)
        payload = self.provider.fetch_forecast(city)
        record = normalize_forecast(payload)
        self._record(self.store.record_forecast, record)
        return record

    def _record(self, write, record) -> None:
        """Submit a history write; nothing it does may reach the response."""
        try:
            write(record)
        except Exception as exc:
            logger.error("Failed to queue history write", extra={"city": record.city, "error": str(exc)})

    def get_history(self, city: Optional[str], limit: object = None) -> HistoryResponse:
        """Return stored current-weather queries for a city, newest first."""
        city = _require_city(city)
        if not self.store.ready:
            return HistoryResponse(city=city, count=0, history=[], message=DATABASE_UNAVAILABLE)
        resolved = self._resolve_limit(limit)
        history = self.store.query_history(city, resolved)
        return HistoryResponse(city=city, count=len(history), history=history)

    def _resolve_limit(self, limit: object) -> int:
        """Coerce ``limit`` to an int and clamp it to ``[1, history_max_limit]``."""
        if limit is None or (isinstance(limit, str) and not limit.strip()):
            return self.settings.history_default_limit
        try:
            value = int(str(limit).strip())
        except ValueError:
            raise InvalidParameterError("Limit must be an integer")
        return max(1, min(value, self.settings.history_max_limit))

    def get_popular_cities(self, cities: Optional[Sequence[str]] = None) -> CitiesResponse:
        """Look up every popular city concurrently; failed cities are logged and left out."""
        names = list(cities if cities is not None else self.settings.popular_cities)
        if not names:
            return CitiesResponse(cities=[])

        # Lookups start together, so one wait bounds each call by wall-clock time.
        pool = ThreadPoolExecutor(max_workers=len(names), thread_name_prefix="popular-city")
        try:
            futures = [pool.submit(self._city_summary, name) for name in names]
            wait(futures, timeout=self.settings.popular_city_timeout_seconds)
        finally:
            pool.shutdown(wait=False, cancel_futures=True)

        summaries: List[CitySummary] = []
        for name, future in zip(names, futures):
            if not future.done():
                logger.warning("Popular city lookup timed out", extra={"city": name})
                continue
            try:
                summaries.append(future.result())
            except Exception as exc:
                logger.warning("Error fetching popular city", extra={"city": name, "error": str(exc)})
        return CitiesResponse(cities=summaries)

    def _city_summary(self, city: str) -> CitySummary:
        """Fetch one popular city under its own timeout."""
        payload = self.provider.fetch_current(city, timeout=self.settings.popular_city_timeout_seconds)
        return to_city_summary(normalize_current(payload))

    def check_alerts(self, city: Optional[str], email: Optional[str] = None) -> AlertsResponse:
        """Evaluate alert thresholds against current conditions. ``email`` is unused."""
        city = _require_city(city, "City is required")
        if email:
            logger.debug("Alert email supplied but delivery is not supported", extra={"city": city})
        try:
            payload = self.provider.fetch_current(city)
        except UpstreamError as exc:
            if exc.status_code == 404:
                raise UpstreamError("City not found", 404) from exc
            raise UpstreamError(exc.message, 500) from exc
        record = normalize_current(payload)
        found = alerts.evaluate(record)
        return AlertsResponse(city=city, alerts=found, alert_count=len(found))
