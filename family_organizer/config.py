"""Application configuration loaded from environment variables"""

import logging
from functools import lru_cache
from pathlib import Path
from typing import List

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables"""

    # Application
    app_name: str = "Family Organizer API"
    debug: bool = False
    log_level: str = "INFO"
    cors_origins: str = "http://localhost:3000"
    host: str = "0.0.0.0"
    port: int = 8000

    # Database
    data_dir: str = "/app/data"
    database_file: str = "family.json"

    # Search
    search_min_query_length: int = 2
    search_default_limit: int = 20
    search_max_limit: int = 100

    # Tasks
    tasks_default_limit: int = 50
    tasks_max_limit: int = 100

    # Activity log
    activity_retention_days: int = 90

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"

    @property
    def database_path(self) -> Path:
        return Path(self.data_dir) / "db" / self.database_file

    @property
    def allowed_origins(self) -> List[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]


def validate_settings(settings: Settings) -> list:
    """Check settings for values that would break request handling"""
    errors = []

    if settings.search_min_query_length < 1:
        errors.append("SEARCH_MIN_QUERY_LENGTH must be at least 1")

    if settings.search_default_limit > settings.search_max_limit:
        errors.append("SEARCH_DEFAULT_LIMIT cannot exceed SEARCH_MAX_LIMIT")

    if settings.tasks_default_limit > settings.tasks_max_limit:
        errors.append("TASKS_DEFAULT_LIMIT cannot exceed TASKS_MAX_LIMIT")

    if settings.activity_retention_days < 1:
        errors.append("ACTIVITY_RETENTION_DAYS must be at least 1")

    return errors


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance"""
    base_settings = Settings()

    for error in validate_settings(base_settings):
        logger.warning(f"Config warning: {error}")

    return base_settings


# Convenience access
settings = get_settings()
