"""Application configuration management."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    environment: str = "development"
    debug: bool = True
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:8000"

    # Redis (book cache + quota counters)
    redis_url: str = "redis://localhost:6379/0"

    # Google Books API
    google_books_api_key: Optional[str] = None
    google_books_base_url: str = "https://www.googleapis.com/books/v1/volumes"
    google_books_timeout: int = 10  # seconds
    google_books_daily_quota: int = 1000

    # Lookup / scanning
    search_max_results: int = 10
    scan_debounce_seconds: float = 2.0

    # Bulk import
    bulk_import_max_size_mb: int = 10
    upload_dir: str = "/tmp/catalog_uploads"

    # Celery
    celery_broker_url: str = "redis://localhost:6379/1"
    celery_result_backend: str = "redis://localhost:6379/2"

    @property
    def cors_origins(self) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        return [origin.strip() for origin in self.allowed_origins.split(",")]


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
