"""
Main FastAPI application module.

This module initializes the FastAPI application and includes route definitions.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from injector.api.routes import api_router
from injector.core.logging_config import get_logger, setup_logging

# Initialize logging
setup_logging()
logger = get_logger(__name__)


def create_application() -> FastAPI:
    """
    Factory function to create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    application = FastAPI(
        title="Suggestion Injector API",
        description="Places code review suggestions next to their lines in rendered diffs",
        version="1.0.0",
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # Configure this appropriately for production
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.include_router(api_router)

    @application.on_event("startup")
    async def startup_event():
        logger.info("Starting Suggestion Injector API")

    @application.on_event("shutdown")
    async def shutdown_event():
        logger.info("Shutting down Suggestion Injector API")

    return application


# Create the FastAPI application instance
app = create_application()


if __name__ == "__main__":
    import uvicorn

    logger.info("Starting Suggestion Injector API server in development mode")
    uvicorn.run(
        "injector.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,  # Enable auto-reload for development
        log_level="info",
    )
