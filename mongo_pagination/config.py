"""Configuration management for Mongo Cursor Pagination."""

import logging
from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_LIMIT,
    DEFAULT_TIE_BREAKER_DIRECTION,
    TIE_BREAKER_FIELD,
)


class Settings(BaseSettings):
    """Library settings with environment variable support."""

    app_name: str = "Mongo Cursor Pagination"

    # Database settings
    mongodb_url: str = "mongodb://localhost:27017"
    mongodb_database: str = "mongodb_cursor_pagination"
    mongodb_server_selection_timeout_ms: int = 5000

    # Logging settings
    log_level: str = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    # Pagination settings
    default_page_size: int = DEFAULT_LIMIT
    max_page_size: int = 200
    tie_breaker_field: str = TIE_BREAKER_FIELD
    tie_breaker_direction: int = DEFAULT_TIE_BREAKER_DIRECTION

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @field_validator("tie_breaker_direction")
    @classmethod
    def validate_tie_breaker_direction(cls, v):
        """Validate tie-breaker sort direction."""
        if v not in (1, -1):
            raise ValueError("Tie-breaker direction must be 1 or -1")
        return v

    @field_validator("default_page_size", "max_page_size")
    @classmethod
    def validate_page_size(cls, v):
        """Validate page sizes are positive."""
        if v < 1:
            raise ValueError("Page size must be at least 1")
        return v

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
        "env_parse_none_str": True,
    }


# Global settings instance
settings = Settings()


def get_settings() -> Settings:
    """Get library settings."""
    return settings


def configure_logging(config: Optional[Settings] = None) -> None:
    """Configure root logging from settings."""
    config = config or get_settings()
    logging.basicConfig(level=config.log_level, format=config.log_format)
    logging.getLogger().setLevel(getattr(logging, config.log_level))
