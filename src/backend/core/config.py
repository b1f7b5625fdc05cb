"""
Application configuration using Pydantic Settings.

All configuration is loaded from environment variables or a local .env file.
"""

import json
from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "LiveVote"
    APP_ENV: str = "development"
    DEBUG: bool = False

    # Azure Cosmos DB
    # Either the endpoint (RBAC via DefaultAzureCredential) or a connection
    # string (local emulator) must be set for the API to start.
    AZURE_COSMOS_ENDPOINT: str | None = None
    AZURE_COSMOS_CONNECTION_STRING: str | None = None
    AZURE_COSMOS_DATABASE: str = "livevote"
    AZURE_COSMOS_DISABLE_SSL: bool = False  # Emulator uses a self-signed cert

    # CORS - stored as comma-separated string to avoid pydantic-settings JSON parsing issues
    CORS_ORIGINS: str = "http://localhost:3000"

    # Shared secret for the admin endpoints (X-Admin-Key header).
    # Left unset in local development, which leaves the admin API open.
    ADMIN_API_KEY: str | None = None

    # Aggregation scheduler
    SCHEDULER_ENABLED: bool = True
    SCHEDULER_INTERVAL_SECONDS: float = 60  # Used when the config document can't be read
    BATCH_HISTORY_LIMIT: int = 10
    SCHEDULER_HISTORY_LIMIT: int = 50

    # Voting client (CLI)
    CLIENT_STORAGE_PATH: str = "~/.livevote/storage.json"
    API_BASE_URL: str = "http://localhost:8000"

    @field_validator("SCHEDULER_INTERVAL_SECONDS")
    @classmethod
    def validate_interval(cls, v: float) -> float:
        """Reject non-positive scheduler intervals at startup."""
        if v <= 0:
            raise ValueError("SCHEDULER_INTERVAL_SECONDS must be greater than 0")
        return v

    @field_validator("BATCH_HISTORY_LIMIT", "SCHEDULER_HISTORY_LIMIT")
    @classmethod
    def validate_history_limit(cls, v: int) -> int:
        if v < 1:
            raise ValueError("History limits must be at least 1")
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        """Get CORS origins as a list."""
        try:
            return json.loads(self.CORS_ORIGINS)
        except json.JSONDecodeError:
            return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


settings = get_settings()
