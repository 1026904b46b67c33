"""natega-search settings loaded from environment variables."""

from enum import StrEnum

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    """Deployment environment."""

    DEV = "dev"
    STAGING = "staging"
    PROD = "prod"


class LogLevel(StrEnum):
    """Supported log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class Settings(BaseSettings):
    """Application-wide settings loaded from environment variables / .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # --- Database ---
    DATABASE_URL: str = Field(
        default="sqlite+aiosqlite:///./students.db",
        description="Async SQLAlchemy connection string (sqlite+aiosqlite or postgresql+asyncpg).",
    )

    # --- API ---
    API_HOST: str = Field(
        default="127.0.0.1",
        description="Interface the HTTP server binds to.",
    )
    API_PORT: int = Field(
        default=8000,
        ge=1,
        le=65535,
        description="Port the HTTP server listens on.",
    )

    # --- Search ---
    SEARCH_RESULT_LIMIT: int = Field(
        default=20,
        ge=1,
        description="Maximum number of ranked results returned per query.",
    )

    # --- Ingestion ---
    INGEST_SOURCE: str = Field(
        default="students.csv",
        description="Local CSV path or http(s) URL of the student records.",
    )
    INGEST_HTTP_TIMEOUT: float = Field(
        default=60.0,
        gt=0,
        description="Seconds allowed for downloading a remote source.",
    )
    INGEST_ENCODING: str = Field(
        default="utf-8-sig",
        description="Text encoding of the CSV source.",
    )

    # --- Logging ---
    LOG_LEVEL: LogLevel = Field(
        default=LogLevel.INFO,
        description="Application log level.",
    )

    # --- Environment ---
    ENVIRONMENT: Environment = Field(
        default=Environment.DEV,
        description="Deployment environment (dev/staging/prod).",
    )


def get_settings() -> Settings:
    """Factory function for dependency injection via FastAPI Depends."""
    return Settings()
