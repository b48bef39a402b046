from __future__ import annotations

import functools
import warnings

from pydantic import field_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    app_name: str = "QuickDose API"
    environment: str = "development"
    secret_key: str = "changeme"

    database_url: str = "postgresql+asyncpg://postgres:postgres@db:5432/quickdose"
    redis_url: str = "redis://redis:6379/0"

    # CORS configuration
    cors_origins: str = "*"

    access_token_ttl_hours: int = 12
    otp_length: int = 6
    otp_ttl_seconds: int = 300

    default_radius_km: float = 50.0
    max_radius_km: float = 100.0
    shop_cache_ttl_seconds: int = 60

    rate_limit_default: str = "60/minute"

    model_config = {
        "env_file": ".env",
        "case_sensitive": False,
    }

    @field_validator("secret_key")
    @classmethod
    def validate_secret_key(cls, v: str) -> str:
        """Validate SECRET_KEY meets security requirements."""
        insecure_defaults = [
            "changeme",
            "change-me",
            "dev-secret",
            "secret",
            "password",
            "admin",
        ]

        if len(v) < 32:
            raise ValueError(
                f"SECRET_KEY must be at least 32 characters long (current: {len(v)}). "
                "Generate a secure key with: openssl rand -base64 32"
            )

        if v.lower() in insecure_defaults:
            raise ValueError(
                "SECRET_KEY cannot be a default value. "
                "Generate a secure key with: openssl rand -base64 32"
            )

        return v

    @field_validator("otp_length")
    @classmethod
    def validate_otp_length(cls, v: int) -> int:
        if not 4 <= v <= 10:
            raise ValueError("OTP_LENGTH must be between 4 and 10 digits")
        if v < 6:
            warnings.warn(
                f"OTP length {v} is short. Use at least 6 digits outside development.",
                UserWarning,
            )
        return v

    @field_validator("max_radius_km")
    @classmethod
    def validate_max_radius(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("MAX_RADIUS_KM must be positive")
        return v


@functools.lru_cache()
def get_settings() -> Settings:
    return Settings()


__all__ = ["Settings", "get_settings"]
