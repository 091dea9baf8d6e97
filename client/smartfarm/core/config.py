"""
Client configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "SmartFarm Booking Client"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Backend
    BACKEND_URL: str = "http://localhost:5000"
    REQUEST_TIMEOUT: float = 10.0  # seconds

    # Session persistence
    SESSION_STORE: str = "file"  # file, memory
    SESSION_FILE: str = "~/.smartfarm/session.json"

    # Bookings
    BOOKING_CACHE_TTL: int = 60  # seconds
    BLOCKING_STATUSES: list[str] = ["pending", "approved"]
    ADVISORY_OVERLAP_CHECK: bool = True
    BOOKING_SUCCESS_CLOSE_DELAY: float = 2.0  # seconds

    # Server-sent events
    SSE_ENABLED: bool = True
    SSE_RECONNECT_DELAY: float = 5.0  # seconds

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
