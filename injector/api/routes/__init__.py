"""
API routes initialization.

This module aggregates all router modules into a single API router.
"""

from fastapi import APIRouter

from injector.api.routes.diff import router as diff_router
from injector.api.routes.health import router as health_router
from injector.api.routes.suggestions import router as suggestions_router

# Create the main API router and include all sub-routers
api_router = APIRouter()

api_router.include_router(health_router, tags=["health"])
api_router.include_router(suggestions_router, prefix="/api", tags=["suggestions"])
api_router.include_router(diff_router, prefix="/api", tags=["diff"])
