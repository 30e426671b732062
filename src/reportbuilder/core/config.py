"""
Application configuration management using Pydantic Settings.

Loads configuration from environment variables and .env files.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ==========================================================================
    # Application Settings
    # ==========================================================================
    environment: str = Field(default="development", description="Environment name")
    debug: bool = Field(default=False, description="Debug mode")
    log_level: str = Field(default="INFO", description="Logging level")

    app_name: str = Field(default="Dynamic Report Builder", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    api_v1_prefix: str = Field(default="/api/v1", description="API v1 prefix")

    # CORS
    cors_origins: list[str] = Field(
        default=["http://localhost:3000", "http://localhost:5173"],
        description="Allowed CORS origins",
    )

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from comma-separated string."""
        if isinstance(v, str):
            return [origin.strip() for origin in v.split(",") if origin.strip()]
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalize and check the logging level name."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level

    # ==========================================================================
    # User Field Storage
    # ==========================================================================
    field_store_path: Path | None = Field(
        default=Path("data/user_fields.json"),
        description="JSON file holding user-defined fields (unset keeps them in memory)",
    )
    field_store_key: str = Field(
        default="report_builder_user_fields_v2",
        description="Storage key the user field list is saved under",
    )

    # ==========================================================================
    # Demo Dataset
    # ==========================================================================
    demo_row_count: int = Field(default=28, ge=0, le=10_000, description="Generated order rows")
    demo_seed: int | None = Field(default=None, description="Random seed for the demo dataset")

    # ==========================================================================
    # Export
    # ==========================================================================
    export_basename: str = Field(default="orders", description="Prefix of exported file names")
    export_sheet_title: str = Field(default="Orders", description="XLSX worksheet title")
    export_pdf_title: str = Field(default="Orders Report", description="PDF document title")
    export_pdf_font_size: int = Field(default=8, ge=4, le=24, description="PDF table font size")

    @property
    def is_production(self) -> bool:
        """Whether the app runs in production (JSON logs, no docs)."""
        return self.environment == "production"


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses lru_cache to ensure settings are only loaded once.
    """
    return Settings()


# Global settings instance
settings = get_settings()
