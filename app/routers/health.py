"""
Driving School Matching - Health Check Router
Provides API health status endpoint.
"""

from fastapi import APIRouter
from datetime import datetime, timezone

from app.config import get_settings

router = APIRouter()
settings = get_settings()


@router.get("/health")
async def health_check():
    """
    Health check for the API.

    Returns:
        - API status
        - Current timestamp
        - Environment info
        - Matching engine configuration
    """
    return {
        "status": "ok",
        "service": "driving-school-matching-api",
        "version": settings.app_version,
        "environment": settings.app_env,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "checks": {
            "matching_engine": {
                "status": "healthy",
                "tie_break": settings.matching_tie_break
            }
        }
    }
