"""
Configuration settings for the Pizza Tracker API.
Uses pydantic-settings for type-safe environment variable management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "postgresql://pizza_user:changeme@db:5432/pizza_tracker"

    # Hosted auth service (tokens are only verified here, never issued)
    AUTH_JWT_SECRET: str = "dev-secret-key-change-in-production"
    AUTH_JWT_ALGORITHM: str = "HS256"
    AUTH_JWT_AUDIENCE: str = "authenticated"

    # Frontend
    FRONTEND_URL: str = "http://localhost:3000"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Logging
    LOG_LEVEL: str = "INFO"

    # Leaderboards
    LEADERBOARD_WINDOW_SIZE: int = 5
    LEADERBOARD_PAGE_SIZE: int = 50
    HIGHLIGHT_TOP_N: int = 10
    RANKING_REFERENCE_YEAR: int = 2025

    # Public profile pages
    PUBLIC_PROFILE_PAGE_SIZE: int = 20


# Global settings instance
settings = Settings()
