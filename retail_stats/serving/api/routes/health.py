"""
Health Check Endpoints

``/health`` reports; ``/health/live`` and ``/health/ready`` answer the
process manager. Reports soft-fail without a database, so a missing database
degrades the service instead of taking it down.
"""

from datetime import datetime, timezone
from typing import Any, Dict

from fastapi import APIRouter, Response, status
from pydantic import BaseModel

from retail_stats.config import get_settings
from retail_stats.database.connection import check_database_health

router = APIRouter()


class HealthResponse(BaseModel):
    """Service status"""
    status: str
    version: str
    environment: str
    timestamp: datetime
    checks: Dict[str, Any]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    settings = get_settings()
    database = await check_database_health()
    return HealthResponse(
        status="healthy" if database["status"] == "healthy" else "degraded",
        version=settings.version,
        environment=settings.app_env,
        timestamp=datetime.now(timezone.utc),
        checks={"database": database},
    )


@router.get("/health/live")
async def liveness_check() -> Dict[str, str]:
    return {"status": "alive"}


@router.get("/health/ready")
async def readiness_check(response: Response) -> Dict[str, str]:
    """Ready once the database answers."""
    database = await check_database_health()
    if database["status"] != "healthy":
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return {"status": "not_ready", "reason": "database_unavailable"}
    return {"status": "ready"}
