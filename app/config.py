"""
Driving School Matching - Configuration Module
Loads environment variables and provides app-wide settings.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Optional


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # App Info
    app_name: str = "Driving School Matching API"
    app_version: str = "0.1.0"
    app_env: str = "development"
    debug: bool = True
    log_level: str = "INFO"

    # API Settings
    api_prefix: str = "/api/v1"

    # CORS
    cors_origins: str = "*"  # Comma-separated list in production

    # Matching Engine
    matching_tie_break: str = "shuffle"  # "shuffle" or "stable"
    matching_seed: Optional[int] = None
    utilization_per_assignment: int = 10
    default_max_students_per_period: int = 10

    # Reporting
    trend_threshold: int = 5

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Uses lru_cache to avoid reading .env file on every request.
    """
    return Settings()
