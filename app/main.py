"""FastAPI application setup for the weather aggregation service."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import router as api_router
from .config import Settings, settings as default_settings
from .data_sources import WeatherProvider, build_provider
from .errors import WeatherServiceError
from .history_store import HistoryStore
from .models import ServiceInfo
from .weather_service import WeatherService
from utils.logging_utils import get_tagged_logger

logger = get_tagged_logger(__name__, tag="app/main")

APP_TITLE = "Weather Forecasting API"
APP_VERSION = "1.0.0"
ENDPOINTS = [
    "/api/weather/current",
    "/api/weather/forecast",
    "/api/weather/history",
    "/api/weather/cities",
    "/api/weather/alerts",
]


async def _service_error_handler(_request: Request, exc: WeatherServiceError) -> JSONResponse:
    """Render service errors as ``{"error": message}`` with their status."""
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


async def _validation_error_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
    """Render malformed requests as a 400 in the same error shape."""
    errors = exc.errors()
    message = errors[0].get("msg", "Invalid request") if errors else "Invalid request"
    return JSONResponse(status_code=400, content={"error": message})


async def _unhandled_error_handler(_request: Request, exc: Exception) -> JSONResponse:
    """Last-resort 500 so every failure keeps the JSON error shape."""
    logger.exception("Unhandled error", extra={"error": str(exc)})
    return JSONResponse(status_code=500, content={"error": str(exc)})


def create_app(
    settings: Settings | None = None,
    *,
    provider: WeatherProvider | None = None,
    store: HistoryStore | None = None,
) -> FastAPI:
    """Build the app with its provider and history store wired in explicitly."""
    settings = settings or default_settings
    provider = provider or build_provider(settings)
    store = store or HistoryStore(settings.database_url)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        yield
        logger.info("Shutting down; draining history writes")
        store.close()

    app = FastAPI(title=APP_TITLE, version=APP_VERSION, lifespan=lifespan)
    app.state.settings = settings
    app.state.weather_service = WeatherService(provider, store, settings)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(WeatherServiceError, _service_error_handler)
    app.add_exception_handler(RequestValidationError, _validation_error_handler)
    app.add_exception_handler(Exception, _unhandled_error_handler)

    @app.get("/", response_model=ServiceInfo)
    def service_info():
        """Service metadata and the endpoint list."""
        return ServiceInfo(message=APP_TITLE, status="running", version=APP_VERSION, endpoints=ENDPOINTS)

    # API routes
    app.include_router(api_router)
    return app


app = create_app()
