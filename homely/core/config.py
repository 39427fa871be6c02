"""
Application configuration using Pydantic Settings.

Values are read from environment variables or a local ``.env`` file.
"""

from functools import lru_cache
from typing import List, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # ===========================================
    # Environment
    # ===========================================
    ENVIRONMENT: Literal["local", "test", "production"] = "local"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    # ===========================================
    # Database
    # ===========================================
    DATABASE_URL: str = "sqlite+aiosqlite:///./homely.db"
    DB_ECHO: bool = False
    # SQLite waits this long for a competing writer before raising "database is locked"
    DB_BUSY_TIMEOUT_SECONDS: float = Field(default=5.0, gt=0)

    # ===========================================
    # Transactions
    # ===========================================
    TRANSACTION_MAX_RETRIES: int = Field(default=3, ge=0, le=10)
    TRANSACTION_RETRY_DELAY_SECONDS: float = Field(default=0.05, ge=0)

    # ===========================================
    # Households & plans
    # ===========================================
    DEFAULT_PLAN_TYPE_ID: int = 1

    # ===========================================
    # Listing
    # ===========================================
    DEFAULT_PAGE_SIZE: int = Field(default=20, ge=1)
    MAX_PAGE_SIZE: int = Field(default=100, ge=1)
    UPCOMING_EVENT_WINDOWS: List[int] = Field(default_factory=lambda: [7, 14, 30])

    # ===========================================
    # Auth (development fallback)
    # ===========================================
    DEV_USER_ID: str = "00000000-0000-0000-0000-000000000001"

    # ===========================================
    # Server
    # ===========================================
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    ALLOWED_ORIGINS: List[str] = Field(
        default_factory=lambda: ["http://localhost:5173", "http://localhost:3000"]
    )


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
