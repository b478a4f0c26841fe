# tutorlink/core/config.py
# All application settings loaded from environment variables / .env file
# Shared by the API server (database, JWT) and the API client (base URL, timeouts)

from functools import lru_cache
from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Single source of truth for all TutorLink configuration.
    pydantic-settings automatically reads from environment variables.
    Variable names are case-insensitive.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_env: str = "development"
    app_name: str = "TutorLink"
    app_version: str = "1.0.0"
    debug: bool = False
    log_level: str = "INFO"

    # Server
    allowed_origins: str = "http://localhost:3000"

    # Database
    database_url: str

    # JWT
    jwt_secret_key: str
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # API client
    api_base_url: str = "http://localhost:5000/api"
    request_timeout_seconds: float = 10.0   # axios default of the web client
    read_retry_attempts: int = 1            # GETs only, NetworkError only
    debounce_seconds: float = 0.3           # filter/search refetch coalescing

    # Notifications (fire-and-forget, logged only)
    notifications_enabled: bool = True
    email_from: str = "noreply@tutorlink.local"
    sms_sender_id: str = "TUTORLINK"

    @property
    def is_production(self) -> bool:
        return self.app_env == "production"

    @property
    def cors_origins(self) -> List[str]:
        """Parse comma-separated ALLOWED_ORIGINS into a list."""
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    """
    Returns a cached Settings instance.
    Use as a FastAPI dependency: settings = Depends(get_settings)
    Or import directly:         from tutorlink.core.config import settings
    """
    return Settings()


# Module-level singleton -- import this directly in most places
settings = get_settings()
