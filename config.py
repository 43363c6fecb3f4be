"""Application configuration using pydantic-settings."""

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Database
    DATABASE_URL: str = "sqlite:///./instruments.db"

    # Single implicit owner; threaded explicitly into every service call
    DEFAULT_OWNER_ID: str = "default"

    # Frontend origins allowed by CORS
    CORS_ORIGINS: list[str] = ["http://localhost:5173"]

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator("DEFAULT_OWNER_ID")
    @classmethod
    def validate_owner_id(cls, v: str) -> str:
        """Reject blank owner ids; every row is scoped by this value."""
        if not v.strip():
            raise ValueError("DEFAULT_OWNER_ID must not be blank")
        return v.strip()

    # App settings
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"
    LOG_SQL: bool = False


settings = Settings()
