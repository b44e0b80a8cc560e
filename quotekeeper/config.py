"""Configuration management for the application."""

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Database (required, checked when the engine is first built)
    database_url: str | None = Field(default=None)

    # Sessions
    session_cookie_name: str = Field(default="session_id")
    session_duration_days: int = Field(default=7, gt=0)

    # Durable store health
    fallback_freshness_seconds: float = Field(default=5.0, ge=0)
    probe_timeout_seconds: float = Field(default=2.0, gt=0)

    # JWT (password reset tokens)
    jwt_secret: str = Field(default="change-me-in-production")
    jwt_algorithm: str = Field(default="HS256")
    password_reset_expiration_minutes: int = Field(default=60)

    # Public links
    app_url: str = Field(default="http://localhost:3000")

    # Redis (Celery broker)
    redis_url: str = Field(default="redis://localhost:6379/0")
    session_reap_interval_seconds: int = Field(default=3600)

    # API
    environment: str = Field(default="development")

    @model_validator(mode="after")
    def validate_production_settings(self) -> "Settings":
        """Validate that production has secure settings."""
        if self.environment == "production":
            if self.jwt_secret == "change-me-in-production":  # noqa: S105
                raise ValueError("JWT_SECRET must be changed in production")
            if self.database_url and "localhost" in self.database_url:
                raise ValueError("DATABASE_URL should not use localhost in production")
        return self

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def session_max_age_seconds(self) -> int:
        return self.session_duration_days * 24 * 60 * 60


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
