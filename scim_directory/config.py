"""
Configuration module for SCIM Directory.

This module provides environment variable configuration and settings management
using Pydantic Settings for type-safe configuration.
"""
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class SCIMDirectorySettings(BaseSettings):
    """
    Configuration settings for the SCIM Directory application.

    All settings are loaded from environment variables (or a .env file) with
    validation. Every setting has a default so the service starts with a local
    SQLite database out of the box.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    database_url: str = Field(
        "sqlite:///./scim_directory.db",
        description="SQLAlchemy database URL for the directory store",
    )

    base_url: str = Field(
        "https://api.example.com",
        description="Public base URL used to build meta.location and manager $ref values",
    )

    log_level: str = Field(
        "INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    host: str = Field("0.0.0.0", description="Interface uvicorn binds to")

    port: int = Field(8080, ge=1, le=65535, description="Port uvicorn listens on")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard Python logging levels."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"LOG_LEVEL must be one of: {', '.join(valid_levels)}")
        return v.upper()

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        """Require an http(s) URL and drop any trailing slash."""
        if not v.startswith(("https://", "http://")):
            raise ValueError("BASE_URL must be an http:// or https:// URL")
        return v.rstrip("/")

    @field_validator("database_url")
    @classmethod
    def validate_database_url(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("DATABASE_URL cannot be empty")
        return v.strip()


# Global settings instance
settings: Optional[SCIMDirectorySettings] = None


def get_settings() -> SCIMDirectorySettings:
    """
    Get the global settings instance, creating it if necessary.

    Returns:
        SCIMDirectorySettings: The global settings instance

    Raises:
        ValueError: If environment variables hold invalid values
    """
    global settings
    if settings is None:
        settings = SCIMDirectorySettings()
    return settings


def reload_settings() -> SCIMDirectorySettings:
    """
    Force reload settings from environment variables.

    This is useful for testing or when environment variables change.

    Returns:
        SCIMDirectorySettings: New settings instance
    """
    global settings
    settings = SCIMDirectorySettings()
    return settings
