"""
Health check endpoints.
Used for monitoring, deployment readiness checks, and basic connectivity tests.
"""

from fastapi import APIRouter, Depends, HTTPException
from datetime import datetime, timezone

from civicflow.core.errors import PersistenceError
from civicflow.core.settings import settings
from civicflow.dependencies import Services, get_services
from civicflow.services.blob_store import HAS_SEEN_WELCOME_FLAG


router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check():
    """
    Basic health check endpoint.
    Returns 200 if service is running.
    """
    return {
        "status": "healthy",
        "service": settings.APP_NAME,
        "version": settings.APP_VERSION,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@router.get("/db")
async def storage_health(services: Services = Depends(get_services)):
    """
    Storage connectivity check.
    Performs a lightweight read against the blob store.
    """
    try:
        services.blob_store.get_flag(HAS_SEEN_WELCOME_FLAG)
    except PersistenceError as e:
        raise HTTPException(
            status_code=503,
            detail=f"Storage connection failed: {e}",
        )

    return {
        "status": "healthy",
        **services.blob_store.describe(),
        "connected": True,
        "reports_count": len(services.reports),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
