"""Fixed-threshold alert evaluation over current conditions."""

from typing import List

from app.models import Alert, CurrentWeatherRecord

HEAT_THRESHOLD_C = 35
COLD_THRESHOLD_C = 0
WIND_THRESHOLD_MS = 20


def evaluate(record: CurrentWeatherRecord) -> List[Alert]:
    """Return alerts for a record: at most one temperature alert, then the wind alert."""
    alerts: List[Alert] = []
    temp = record.temperature
    wind_speed = record.wind_speed

    if temp > HEAT_THRESHOLD_C:
        alerts.append(Alert(type="heat", severity="high", message=f"Extreme heat warning: {temp}°C"))
    elif temp < COLD_THRESHOLD_C:
        alerts.append(Alert(type="cold", severity="high", message=f"Freezing temperature: {temp}°C"))

    if wind_speed > WIND_THRESHOLD_MS:
        alerts.append(Alert(type="wind", severity="medium", message=f"High wind speed: {wind_speed} m/s"))

    return alerts
