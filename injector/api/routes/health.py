"""
Health check endpoints.
"""

from fastapi import APIRouter, Depends

from injector.core.config import Settings, get_settings

router = APIRouter()


@router.get("/health")
async def health_check(settings: Settings = Depends(get_settings)):
    """
    Simple health check endpoint.

    Returns status information about the API, including version and environment.
    """
    return {
        "status": "healthy",
        "message": "Suggestion Injector API is running.",
        "version": "1.0.0",
        "environment": settings.ENVIRONMENT,
    }
