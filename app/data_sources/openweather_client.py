"""Client for the OpenWeatherMap current-weather and 5-day forecast APIs."""
from __future__ import annotations

import re
import threading
from typing import Any, Dict, Optional

import requests

from app.errors import ConfigurationError, MissingParameterError, UpstreamError
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="openweather_client")

OPENWEATHER_BASE_URL = "https://api.openweathermap.org/data/2.5"
DEFAULT_TIMEOUT = 10.0
DEFAULT_ERROR_MESSAGE = "City not found or API error"
_APPID_PARAM = re.compile(r"(appid=)[^&\s'\")]+", re.IGNORECASE)


class OpenWeatherClient:
    """Thin wrapper around the provider's ``/weather`` and ``/forecast`` endpoints.

    Bodies are returned exactly as the provider sent them. Provider-reported
    failures keep their HTTP status so callers can tell a 404 from the rest.
    """

    def __init__(
        self,
        api_key: str | None,
        *,
        base_url: str = OPENWEATHER_BASE_URL,
        units: str = "metric",
        timeout: float = DEFAULT_TIMEOUT,
        session: requests.Session | None = None,
    ) -> None:
        """Initialize client configuration; the key is checked per call, not here."""
        self.api_key = api_key
        self.base_url = str(base_url).rstrip("/")
        self.units = units
        self.timeout = timeout
        self._session = session
        self._local = threading.local()

    @property
    def session(self) -> requests.Session:
        """Injected session, or one per thread so concurrent lookups never share a pool."""
        if self._session is not None:
            return self._session
        session = getattr(self._local, "session", None)
        if session is None:
            session = self._local.session = requests.Session()
        return session

    def fetch_current(self, city: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Fetch current conditions for a free-text city query."""
        return self._get("weather", city, timeout=timeout)

    def fetch_forecast(self, city: str, *, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Fetch the 5-day/3-hour forecast for a free-text city query."""
        return self._get("forecast", city, timeout=timeout)

    def _get(self, endpoint: str, city: str, *, timeout: Optional[float]) -> Dict[str, Any]:
        """Issue one GET, translating every failure into a service error."""
        if not city or not str(city).strip():
            raise MissingParameterError("City parameter is required")
        if not self.api_key:
            raise ConfigurationError("API key not configured")

        url = f"{self.base_url}/{endpoint}"
        params = {"q": city, "appid": self.api_key, "units": self.units}
        effective_timeout = self.timeout if timeout is None else timeout

        logger.debug(
            "OpenWeather GET",
            extra={"endpoint": endpoint, "city": city, "units": self.units, "timeout": effective_timeout},
        )
        try:
            resp = self.session.get(url, params=params, timeout=effective_timeout)
        except requests.exceptions.RequestException as exc:
            error = self._scrub(f"{type(exc).__name__}: {exc}")
            logger.warning("OpenWeather request failed", extra={"endpoint": endpoint, "city": city, "error": error})
            raise UpstreamError(error, 500) from exc

        if resp.status_code >= 400:
            message = _provider_message(resp)
            logger.warning(
                "OpenWeather returned an error",
                extra={"endpoint": endpoint, "city": city, "status": resp.status_code, "error": message},
            )
            raise UpstreamError(message, resp.status_code)

        try:
            return resp.json()
        except ValueError as exc:
            snippet = self._scrub((resp.text or "")[:200])
            raise UpstreamError(f"OpenWeather returned non-JSON response: {snippet}", 500) from exc

    def _scrub(self, text: str) -> str:
        """Mask the API key wherever requests echoed the request URL back."""
        text = _APPID_PARAM.sub(r"\1***", text)
        if self.api_key:
            text = text.replace(self.api_key, "***")
        return text


def _provider_message(resp: requests.Response) -> str:
    """Return the provider's error message, or a generic one when the body has none."""
    try:
        body = resp.json()
    except ValueError:
        return DEFAULT_ERROR_MESSAGE
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return DEFAULT_ERROR_MESSAGE
