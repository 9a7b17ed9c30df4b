"""
API Routes Module
"""
from .health import router as health_router
from .statistics import router as statistics_router

__all__ = [
    "health_router",
    "statistics_router",
]
