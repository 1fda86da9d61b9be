"""
Configuration module implementing the Singleton pattern for application settings.

Settings are loaded from environment variables and/or .env files, with type
validation. Only the outer layers (API routes, application factory) read them;
the injection core receives its timing values through an explicit context.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings using Pydantic BaseSettings.

    Attributes:
        ENVIRONMENT: Environment configuration (development, staging, production)
        LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        LOG_DIR: Directory for rotating log files
        WEBHOOK_URL: URL notified with the summary of each injection run
        READY_TIMEOUT_SECONDS: Upper bound for waiting on the rendered diff view
        READY_POLL_INTERVAL_SECONDS: Polling interval while waiting for the view
        SETTLE_DELAY_SECONDS: Pause after readiness so late rows can render
        FILTER_MEDIA_FILES: Drop media/binary file sections before parsing
    """

    # Environment configuration
    ENVIRONMENT: str = "development"  # Options: development, staging, production

    # Logging configuration
    LOG_LEVEL: str = "INFO"
    LOG_DIR: str = "logs"

    # External service URLs
    WEBHOOK_URL: str = ""

    # Render target readiness
    READY_TIMEOUT_SECONDS: float = 15.0
    READY_POLL_INTERVAL_SECONDS: float = 0.5
    SETTLE_DELAY_SECONDS: float = 0.5

    # Diff handling
    FILTER_MEDIA_FILES: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=True,
    )


@lru_cache()
def get_settings() -> Settings:
    """
    Create and return a cached instance of the Settings class.

    Returns:
        Settings: The singleton instance of application settings
    """
    return Settings()
