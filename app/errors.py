"""Exception types mapped onto HTTP error responses by the app factory."""


class WeatherServiceError(Exception):
    """Base error carrying the message and HTTP status returned to callers."""
    status_code: int = 500

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class MissingParameterError(WeatherServiceError):
    """A required request input was not supplied."""
    status_code = 400


class InvalidParameterError(WeatherServiceError):
    """A request input could not be coerced to the expected type."""
    status_code = 400


class ConfigurationError(WeatherServiceError):
    """Service is missing configuration it needs to answer (e.g. the provider key)."""
    status_code = 500


class UpstreamError(WeatherServiceError):
    """The weather provider reported an error or could not be reached.

    ``status_code`` is the provider's HTTP status when it answered, otherwise 500.
    """
    status_code = 500


class NormalizationError(WeatherServiceError):
    """A provider payload was missing a mandatory substructure or field."""
    status_code = 500


class StoreError(WeatherServiceError):
    """The history store was reachable but the query failed."""
    status_code = 500
