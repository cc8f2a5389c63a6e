"""Central configuration for the safety-products purchase portal.

This module uses Pydantic Settings for validation and env management.
"""
from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseSettings):
    """Database configuration."""
    model_config = SettingsConfigDict(
        env_prefix="DB_",
        extra="ignore",
    )

    url: str = Field(
        default="sqlite+aiosqlite:///./portal.db",
        description="Async database connection URL (postgresql+asyncpg://... in production)",
    )
    echo: bool = Field(default=False)
    create_all: bool = Field(default=True, description="Create missing tables when the store opens")


class DuplicateSettings(BaseSettings):
    """Duplicate-detection configuration."""
    model_config = SettingsConfigDict(env_prefix="DUPLICATES_", extra="ignore")

    threshold: float = Field(default=0.85, ge=0.0, le=1.0, description="Fuzzy score a field must reach")
    product_name_only_threshold: float = Field(default=0.95, ge=0.0, le=1.0)
    quantity_tolerance: float = Field(default=0.01, gt=0.0)
    fail_open: bool = Field(
        default=True,
        description="Treat a failed read of existing rows as an empty table",
    )


class PDFSettings(BaseSettings):
    """PDF upload and decoding configuration."""
    model_config = SettingsConfigDict(env_prefix="PDF_", extra="ignore")

    max_upload_bytes: int = Field(default=10 * 1024 * 1024, ge=1024)
    min_native_chars: int = Field(
        default=1,
        ge=0,
        description="Below this many characters pdfplumber output is retried with pypdf",
    )


class LoggingSettings(BaseSettings):
    """Logging configuration."""
    model_config = SettingsConfigDict(env_prefix="LOG_", extra="ignore")

    level: str = Field(default="INFO")
    format: Literal["json", "text"] = Field(default="json")
    file: str | None = Field(default=None)


class Settings(BaseSettings):
    """Main application settings."""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = Field(default=False)
    app_name: str = Field(default="Safety Products Purchase Portal")
    version: str = Field(default="0.1.0")
    cors_origins: list[str] = Field(default=["http://localhost:3000"])

    # Sub-configs
    db: DatabaseSettings = Field(default_factory=DatabaseSettings)
    duplicates: DuplicateSettings = Field(default_factory=DuplicateSettings)
    pdf: PDFSettings = Field(default_factory=PDFSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Cached settings singleton."""
    return Settings()


settings = get_settings()
