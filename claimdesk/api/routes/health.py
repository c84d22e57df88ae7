"""
Health Check Routes
Service health monitoring endpoints
Source: https://microservices.io/patterns/observability/health-check-api.html
"""

from typing import Any

from fastapi import APIRouter

from claimdesk.api.config import settings
from claimdesk.db.connection import check_db_connection

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check() -> dict[str, Any]:
    """
    Basic health check endpoint.

    Source: https://docs.docker.com/engine/reference/builder/#healthcheck
    """
    return {
        "status": "healthy",
        "service": "claimdesk-api",
    }


@router.get("/health/detailed")
async def detailed_health_check() -> dict[str, Any]:
    """Health check including the database connection."""
    db_healthy = await check_db_connection()

    return {
        "status": "healthy" if db_healthy else "unhealthy",
        "service": "claimdesk-api",
        "checks": {
            "database": "healthy" if db_healthy else "unhealthy",
            "storage_backend": settings.STORAGE_BACKEND,
        },
    }
