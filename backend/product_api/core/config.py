import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator, ValidationInfo
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application settings with Pydantic validation.
    Loads from environment variables with type checking and validation.
    """

    model_config = SettingsConfigDict(
        # Load env file based on ENVIRONMENT; default to development
        env_file=".env.production" if os.getenv("ENVIRONMENT") == "production" else ".env.development",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    app_name: str = Field(default="Product API")
    environment: str = Field(default="development")
    debug: bool = Field(default=False)
    log_level: str = Field(default="INFO")

    backend_cors_origins: str = Field(default="http://localhost:3000,http://127.0.0.1:3000")

    database_url: str = Field(default="sqlite:///./app.db")

    # Signing key pair, base64-encoded PEM. Required: the app refuses to start without it.
    private_key: Optional[str] = Field(default=None)
    public_key: Optional[str] = Field(default=None)
    jwt_algorithm: str = Field(default="RS256")

    access_token_ttl_minutes: int = Field(default=15)
    refresh_token_ttl_minutes: int = Field(default=60 * 24 * 365)
    # Clock skew tolerance when checking `exp`; zero means strict.
    token_leeway_seconds: int = Field(default=0, ge=0)

    refresh_token_header: str = Field(default="x-refresh")
    access_token_response_header: str = Field(default="x-access-token")

    bcrypt_rounds: int = Field(default=10, ge=4, le=31)

    # Sentry
    sentry_dsn: Optional[str] = Field(default=None)
    sentry_env: str = Field(default="development")

    # Bearer token guarding /metrics in production
    metrics_token: Optional[str] = Field(default=None)

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        """Tokens are signed with the RSA key pair, so only RS* algorithms make sense."""
        v = v.strip().upper()
        if v not in {"RS256", "RS384", "RS512"}:
            raise ValueError("JWT_ALGORITHM must be one of RS256, RS384, RS512")
        return v

    @field_validator("access_token_ttl_minutes", "refresh_token_ttl_minutes")
    @classmethod
    def validate_ttl(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("token TTLs must be positive")
        return v

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str, info: ValidationInfo) -> str:
        """Validate database URL; disallow SQLite in production."""
        if info.data.get("environment") == "production" and v.startswith("sqlite"):
            raise ValueError("SQLite is not allowed for DATABASE_URL in production.")
        return v

    @field_validator("debug")
    @classmethod
    def validate_debug(cls, v: bool, info: ValidationInfo) -> bool:
        """Never allow DEBUG=true in production."""
        if info.data.get("environment") == "production" and v:
            raise ValueError("DEBUG must be false in production.")
        return v


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.
    Validates all environment variables on first access.
    Raises ValidationError if configuration is invalid.
    """
    return Settings()
