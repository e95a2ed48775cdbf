"""
Configuration management module for the Event Updates service.

This module provides centralized configuration management using pydantic-settings
for loading and validating environment variables from .env file.
"""

from functools import lru_cache
from typing import Optional, List

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Either DATABASE_URL or the POSTGRES_* parts must be provided, together with
    the S3 credentials. Optional parameters have sensible defaults.
    """

    # Application Settings
    APP_NAME: str = "Event Updates"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    API_PREFIX: str = "/api"

    # Database - full URL wins over the PostgreSQL parts
    DATABASE_URL: Optional[str] = None
    POSTGRES_USER: Optional[str] = None
    POSTGRES_PASSWORD: Optional[str] = None
    POSTGRES_DB: Optional[str] = None
    POSTGRES_HOST: str = "db"
    POSTGRES_PORT: int = 5432
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20

    # S3 Storage (Required fields)
    S3_ENDPOINT: str
    S3_ACCESS_KEY: str
    S3_SECRET_KEY: str
    S3_BUCKET: str
    S3_REGION: str = "us-east-1"
    S3_PUBLIC_BASE_URL: Optional[str] = None
    S3_VIDEO_TRANSCODE: bool = True

    # Uploads
    MAX_UPLOAD_SIZE_MB: int = Field(default=100, description="Per-file upload ceiling in MiB")

    # API Authentication for admin routes
    API_KEYS: str = Field(
        default="",
        description="Comma-separated list of valid admin API keys"
    )

    # CORS Configuration
    CORS_ORIGINS: str = Field(
        default="https://incevents.netlify.app,http://localhost:5173",
        description="Comma-separated list of allowed CORS origins"
    )

    # Event broadcast
    BROADCAST_ALL_TARGETS: str = Field(
        default="all,All Jila Addhyaksh",
        description="Comma-separated labels meaning 'every non-admin user'"
    )
    ADMIN_DESIGNATION: str = "Admin"

    # Rate limiting
    RATE_LIMIT_ENABLED: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("MAX_UPLOAD_SIZE_MB", "DB_POOL_SIZE")
    @classmethod
    def validate_positive(cls, v: int) -> int:
        """Validate that sizes are positive."""
        if v <= 0:
            raise ValueError("Value must be positive")
        return v

    @model_validator(mode="after")
    def validate_database_source(self) -> "Settings":
        """Require either DATABASE_URL or the full set of POSTGRES_* credentials."""
        if self.DATABASE_URL:
            return self
        missing = [
            name for name in ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")
            if not getattr(self, name)
        ]
        if missing:
            raise ValueError(
                f"DATABASE_URL is not set and PostgreSQL settings are missing: {', '.join(missing)}"
            )
        return self

    @property
    def database_url(self) -> str:
        """
        Resolve the SQLAlchemy connection URL.

        Returns:
            str: DATABASE_URL when set, otherwise a PostgreSQL URL built from parts
        """
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return (
            f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}"
            f"@{self.POSTGRES_HOST}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"
        )

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def get_api_keys(self) -> List[str]:
        """
        Get list of valid API keys from comma-separated string.

        Returns:
            List[str]: List of valid API keys
        """
        return _split_csv(self.API_KEYS)

    def get_cors_origins(self) -> List[str]:
        """
        Get list of allowed CORS origins from comma-separated string.

        Returns:
            List[str]: List of allowed CORS origins
        """
        return _split_csv(self.CORS_ORIGINS)

    def get_broadcast_all_targets(self) -> List[str]:
        """Labels that broadcast a new event to every non-admin user."""
        return _split_csv(self.BROADCAST_ALL_TARGETS)


def _split_csv(value: str) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached Settings instance.

    This function uses lru_cache to ensure only one Settings instance is created
    and reused throughout the application lifecycle.

    Returns:
        Settings: Singleton Settings instance
    """
    return Settings()
