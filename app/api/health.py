"""Service info and health endpoints.

Provides the API index plus liveness and readiness probes.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from app.infrastructure.config import settings
from app.infrastructure.database import get_session

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ServiceInfoResponse(BaseModel):
    """API index response schema."""

    service: str
    version: str
    status: str
    endpoints: dict[str, str]


@router.get("/", response_model=ServiceInfoResponse)
async def service_info() -> ServiceInfoResponse:
    """Describe the service and where its resources live."""
    return ServiceInfoResponse(
        service=settings.service_name,
        version=settings.api_version,
        status="running",
        endpoints={
            "health": "/health",
            "ready": "/ready",
            "categories": "/api/categories",
            "products": "/api/products",
            "docs": "/docs",
        },
    )


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service=settings.service_name,
        version=settings.api_version,
    )


@router.get("/ready")
async def readiness_check(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> JSONResponse:
    """Check if the service can reach its database.

    Returns:
        200 with ``ready`` when ``SELECT 1`` succeeds, 503 otherwise.
    """
    try:
        await session.execute(text("SELECT 1"))
    except Exception as e:
        logger.warning("Readiness check failed", error=str(e))
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable", "database": "unreachable"},
        )
    return JSONResponse(content={"status": "ready", "database": "ok"})
