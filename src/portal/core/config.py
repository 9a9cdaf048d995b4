from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Property Portal"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_user_emails: bool = False  # Set to False in production for GDPR compliance

    # Database
    database_url: str = "sqlite+aiosqlite:///./portal.db"
    database_echo: bool = False

    # Auth
    jwt_secret_key: str = "dev-only-secret-key-please-change-me-0000"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60
    argon2_time_cost: int = 3
    argon2_memory_cost: int = 65536
    argon2_parallelism: int = 1

    # Credential provider
    credential_provider_timeout_seconds: float = 10.0
    temporary_secret_bytes: int = 24  # Entropy for generated temporary secrets
    credential_reset_expire_hours: int = 24

    @field_validator("jwt_secret_key")
    @classmethod
    def validate_jwt_secret(cls, v: str) -> str:
        if len(v) < 32:
            raise ValueError("JWT_SECRET_KEY must be at least 32 characters")
        return v

    @field_validator("credential_provider_timeout_seconds")
    @classmethod
    def validate_provider_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("CREDENTIAL_PROVIDER_TIMEOUT_SECONDS must be positive")
        return v

    # CORS
    cors_origins: list[str] = ["http://localhost:3000"]

    # Email (Resend)
    resend_api_key: str | None = None  # If not set, emails are logged but not sent
    email_from: str = "noreply@example.com"
    email_send_timeout_seconds: int = 10
    app_url: str = "http://localhost:3000"  # Frontend URL for credential-reset links


@lru_cache
def get_settings() -> Settings:
    return Settings()
