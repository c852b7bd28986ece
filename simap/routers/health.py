"""
Health check endpoints for the API.
"""
from fastapi import APIRouter, Depends
from typing import Dict, Any
from datetime import datetime

from simap.config import settings
from simap.dependencies import get_store
from simap.storage.interface import SessionStore

router = APIRouter()

@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns API status and version information.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }

@router.get("/health/storage")
def storage_health(
    store: SessionStore = Depends(get_store)
) -> Dict[str, Any]:
    """
    Check session storage health.
    Reports the configured backend and whether it is reachable.
    """
    try:
        return {
            "status": "healthy",
            "timestamp": datetime.now().isoformat(),
            **store.stats(),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "timestamp": datetime.now().isoformat(),
            "error": str(e)
        }
