"""Health check endpoints."""

from datetime import datetime

from fastapi import APIRouter, status
from pydantic import BaseModel

from app.core import clock
from app.database import check_database_connection
from app.dependencies import AppSettings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    environment: str


class DetailedHealthResponse(HealthResponse):
    """Health of the database plus the scheduling configuration in effect."""

    database: str
    clinic_timezone: str
    clinic_time: datetime
    default_clinician: str


@router.get(
    "/health",
    response_model=HealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Basic health check",
)
async def health_check(config: AppSettings) -> HealthResponse:
    """
    Basic health check endpoint.

    Returns:
        Basic health status
    """
    return HealthResponse(
        status="healthy",
        version=config.app_version,
        environment=config.environment,
    )


@router.get(
    "/health/detailed",
    response_model=DetailedHealthResponse,
    status_code=status.HTTP_200_OK,
    tags=["Health"],
    summary="Detailed health check",
)
async def detailed_health_check(config: AppSettings) -> DetailedHealthResponse:
    """
    Detailed health check.

    Reports ``degraded`` when the database is unreachable or no default
    clinician is configured, since appointments created without a clinician
    would then be left unassigned.
    """
    db_healthy = await check_database_connection()
    clinician_configured = config.default_clinician_id is not None

    return DetailedHealthResponse(
        status="healthy" if db_healthy and clinician_configured else "degraded",
        version=config.app_version,
        environment=config.environment,
        database="healthy" if db_healthy else "unhealthy",
        clinic_timezone=config.clinic_timezone,
        clinic_time=clock.utcnow().astimezone(config.tz),
        default_clinician="configured" if clinician_configured else "missing",
    )
