"""
Configuration management using Pydantic settings.
Handles database URL, JWT secrets, storage buckets and mail settings.
"""

from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import Optional, List
from functools import lru_cache


class Settings(BaseSettings):
    """Application settings loaded from the environment and an optional .env file."""

    # Application configuration
    app_name: str = "TownWrent API"
    app_version: str = "1.0.0"
    environment: str = "development"
    debug: bool = False
    testing: bool = False

    # Database configuration
    database_url: str = "sqlite+aiosqlite:///./townwrent.db"
    create_tables_on_startup: bool = True

    # JWT configuration
    jwt_secret_key: str = "your-secret-key-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    jwt_refresh_token_expire_days: int = 7
    password_reset_expire_minutes: int = 30
    min_password_length: int = 6

    # Storage configuration
    storage_root: str = "./storage"
    public_base_url: str = "http://localhost:8000"
    property_images_bucket: str = "property-images"
    avatars_bucket: str = "avatars"
    fallback_image_url: str = "https://images.unsplash.com/photo-1600585154340-be6161a56a0c"

    # Listing limits
    max_images_per_property: int = 5
    max_file_size: int = 5 * 1024 * 1024  # 5MB

    # Listing draft persistence
    draft_dir: str = "./drafts"
    draft_key: str = "tw-list-property-draft"
    draft_cookie_name: str = "tw_draft_id"

    # Role selection
    role_cookie_name: str = "userRole"

    # Outgoing mail; reset links are only logged when smtp_host is empty
    smtp_host: Optional[str] = None
    smtp_port: int = 587
    smtp_username: Optional[str] = None
    smtp_password: Optional[str] = None
    smtp_use_tls: bool = True
    mail_from: str = "no-reply@townwrent.local"
    password_reset_redirect_url: str = "http://localhost:3000/reset-password"

    # API configuration
    api_prefix: str = "/api"
    cors_origins: List[str] = ["http://localhost:3000"]
    max_request_size: int = 30 * 1024 * 1024

    # Pagination defaults
    default_page_size: int = 20
    max_page_size: int = 100

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000

    @field_validator("database_url", mode="before")
    @classmethod
    def validate_database_url(cls, v):
        """Ensure an async driver is used."""
        if not v:
            raise ValueError("DATABASE_URL is required")
        if v.startswith("postgresql://"):
            return v.replace("postgresql://", "postgresql+asyncpg://", 1)
        if v.startswith("sqlite:///"):
            return v.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
        return v

    @field_validator("jwt_secret_key", mode="before")
    @classmethod
    def validate_jwt_secret_key(cls, v):
        """Validate JWT secret key strength."""
        if not v:
            raise ValueError("JWT_SECRET_KEY is required")
        if len(v) < 32 and v != "your-secret-key-change-in-production":
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters long")
        return v

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "testing", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of: {allowed_envs}")
        return v

    @field_validator("public_base_url")
    @classmethod
    def strip_trailing_slash(cls, v):
        return v.rstrip("/")

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing mode."""
        return self.environment == "testing" or self.testing

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    This ensures we only create one instance of settings throughout the app lifecycle.
    """
    return Settings()


# Global settings instance
settings = get_settings()
