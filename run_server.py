import uvicorn

from app.config import settings
from utils.logging_utils import get_tagged_logger, setup_logging

logger = get_tagged_logger(__name__, tag="server")


if __name__ == "__main__":
    setup_logging(level=settings.log_level, job_name="weather_api")
    if not settings.openweather_api_key:
        logger.warning("OPENWEATHER_API_KEY is not set; current/forecast/alerts will return 500")
    logger.info(f"Server starting on http://0.0.0.0:{settings.port}")

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=settings.port,
        reload=False,
    )
