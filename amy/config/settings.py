"""
Application Settings for Amy

Centralized configuration using Pydantic Settings with .env support.
All environment variables are validated at startup.
"""

from functools import lru_cache
from typing import Optional
from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables.

    Identity and user lookups go through Supabase, AI parsing through Gemini,
    and transactional email through Resend.
    """

    # Supabase Configuration (auth + user directory)
    supabase_url: str = ""
    supabase_service_role_key: Optional[str] = None
    supabase_jwt_secret: Optional[str] = None

    # Google AI Configuration (accepts GOOGLE_API_KEY or GEMINI_API_KEY)
    google_api_key: Optional[str] = None
    gemini_api_key: Optional[str] = None
    gemini_model: str = "gemini-2.0-flash"

    # Email (Resend)
    resend_api_key: Optional[str] = None
    resend_api_url: str = "https://api.resend.com"
    resend_webhook_secret: Optional[str] = None
    email_from: str = "Amy <noreply@amy.bz>"
    app_url: str = "http://localhost:3000"

    # Application Settings
    environment: str = "development"
    debug: bool = False
    log_level: str = "INFO"

    # CORS Configuration
    allowed_origins: list[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
    ]

    # AI rate limiting (shared across all AI endpoints)
    ai_rate_limit_per_hour: int = 25
    ai_request_retention_hours: int = 24

    # Database Configuration (SQLModel/SQLAlchemy)
    database_url: Optional[str] = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_pool_timeout: int = 30
    database_echo: bool = False

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @model_validator(mode="after")
    def validate_keys(self) -> "Settings":
        """Normalize API key aliases and check production requirements."""
        if not self.google_api_key and self.gemini_api_key:
            self.google_api_key = self.gemini_api_key

        if self.is_production and not self.database_url:
            raise ValueError("DATABASE_URL is required when ENVIRONMENT=production")

        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment.lower() == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development."""
        return self.environment.lower() == "development"

    @property
    def dashboard_url(self) -> str:
        """Link embedded in notification emails."""
        base = self.app_url if self.app_url.startswith("http") else f"https://{self.app_url}"
        return f"{base.rstrip('/')}/dashboard"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience export for direct import
settings = get_settings()
