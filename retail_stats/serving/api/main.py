"""
FastAPI Application Factory

Creates and configures the statistics API application.
"""

from typing import Callable, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware

from retail_stats.config import get_settings
from retail_stats.serving.api.middleware import RequestLoggingMiddleware
from retail_stats.serving.api.routes import health_router, statistics_router


def create_api_app(lifespan: Optional[Callable] = None) -> FastAPI:
    """
    Create and configure FastAPI application.

    Args:
        lifespan: Optional lifespan context manager (startup/shutdown)

    Returns:
        Configured FastAPI app instance
    """
    settings = get_settings()
    app = FastAPI(
        title="Retail Statistics API",
        description="Sales statistics for the shop back office",
        version=settings.version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET"],
        allow_headers=["*"],
    )
    app.add_middleware(GZipMiddleware, minimum_size=1000)
    app.add_middleware(RequestLoggingMiddleware)

    app.include_router(health_router, prefix="/api/v1", tags=["Health"])
    app.include_router(statistics_router, prefix="/api/v1/statistics", tags=["Statistics"])

    @app.get("/api/v1/info")
    async def api_info():
        """API information endpoint."""
        return {
            "name": "Retail Statistics API",
            "version": settings.version,
            "environment": settings.app_env,
            "documentation": "/docs",
        }

    return app
