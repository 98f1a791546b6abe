"""HTTP API for the weather aggregation service."""

from typing import Optional

from fastapi import APIRouter, Depends, Request

from .models import (
    AlertRequest,
    AlertsResponse,
    CitiesResponse,
    CurrentWeatherRecord,
    ForecastRecord,
    HistoryResponse,
)
from .weather_service import WeatherService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/api")

router = APIRouter(prefix="/api/weather")


def get_weather_service(request: Request) -> WeatherService:
    """Return the service the app factory attached at startup."""
    return request.app.state.weather_service


@router.get("/current", response_model=CurrentWeatherRecord)
def current_weather(city: Optional[str] = None, service: WeatherService = Depends(get_weather_service)):
    """Current conditions for a city."""
    logger.info(f"Current weather requested for {city!r}")
    return service.get_current(city)


@router.get("/forecast", response_model=ForecastRecord)
def forecast(city: Optional[str] = None, service: WeatherService = Depends(get_weather_service)):
    """5-day/3-hour forecast for a city."""
    logger.info(f"Forecast requested for {city!r}")
    return service.get_forecast(city)


@router.get("/history", response_model=HistoryResponse, response_model_exclude_unset=True)
def history(
    city: Optional[str] = None,
    limit: Optional[str] = None,
    service: WeatherService = Depends(get_weather_service),
):
    """Previously stored current-weather queries, newest first."""
    return service.get_history(city, limit)


@router.get("/cities", response_model=CitiesResponse)
def popular_cities(service: WeatherService = Depends(get_weather_service)):
    """Current conditions for the fixed popular-cities list."""
    return service.get_popular_cities()


@router.post("/alerts", response_model=AlertsResponse)
def check_alerts(req: Optional[AlertRequest] = None, service: WeatherService = Depends(get_weather_service)):
    """Threshold alerts for a city's current conditions."""
    req = req or AlertRequest()
    return service.check_alerts(req.city, req.email)
