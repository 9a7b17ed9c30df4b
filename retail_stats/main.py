"""
Retail Statistics API

ASGI application with its startup/shutdown hooks, and the console entry
point that serves it.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
import structlog

from retail_stats.config import get_settings
from retail_stats.config.logging import configure_logging
from retail_stats.database.connection import init_database, close_database
from retail_stats.serving.api import create_api_app

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging()
    settings = get_settings()
    logger.info("Statistics API starting", environment=settings.app_env, version=settings.version)

    # Reports soft-fail without a database, so the API still starts
    try:
        await init_database()
    except Exception as e:
        logger.warning("Starting without database", error=str(e), error_type=type(e).__name__)

    yield

    await close_database()
    logger.info("Statistics API stopped")


app = create_api_app(lifespan=lifespan)


def run() -> None:
    """Serve ``app`` with uvicorn on the configured host and port."""
    import uvicorn

    settings = get_settings()
    uvicorn.run(app, host=settings.api.host, port=settings.api.port, log_config=None)
