"""Application configuration pulled from environment variables via pydantic."""
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from utils.logging_utils import get_tagged_logger
logger = get_tagged_logger(__name__, tag="config")

DEFAULT_POPULAR_CITIES = ["London", "New York", "Tokyo", "Paris", "Sydney", "Dubai", "Mumbai", "Singapore"]


class Settings(BaseSettings):
    """Environment-driven configuration for the weather aggregation service."""
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    port: int = 5001
    log_level: str = "INFO"
    openweather_api_key: str | None = None
    openweather_base_url: str = "https://api.openweathermap.org/data/2.5"
    units: str = "metric"
    database_url: str | None = None
    frontend_url: str = "http://localhost:3000"
    upstream_timeout_seconds: float = 10.0
    popular_city_timeout_seconds: float = 5.0
    popular_cities: list[str] = Field(default_factory=lambda: list(DEFAULT_POPULAR_CITIES))
    history_default_limit: int = 10
    history_max_limit: int = 100

    @field_validator("openweather_base_url", mode="after")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        """Normalize base URLs to avoid double slashes."""
        return str(v).rstrip("/")

    @field_validator("openweather_api_key", "database_url", mode="after")
    @classmethod
    def blank_to_none(cls, v: str | None) -> str | None:
        """Treat empty strings from the environment as unset."""
        if v is None or not str(v).strip():
            return None
        return v


settings = Settings()


if __name__ == "__main__":
    logger.setLevel("DEBUG")
    logger.debug(f"Loaded settings: {settings.model_dump_json(indent=4, exclude={'openweather_api_key'})}")
