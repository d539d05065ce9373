"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

import structlog
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from storecatalog.infrastructure.config import settings
from storecatalog.infrastructure.database import get_database

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="store-catalog-api",
        version=settings.api_version,
    )


@router.get("/ready", response_model=None)
async def readiness_check() -> dict[str, str] | JSONResponse:
    """Check if service is ready to accept requests.

    Returns:
        Readiness status; 503 when the database cannot be reached.
    """
    try:
        await get_database().ping()
    except (SQLAlchemyError, OSError) as exc:
        logger.warning("Database not reachable", error=str(exc))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    return {"status": "ready"}
