"""
Configuration module for the BoxWall news pipeline.

This module provides the Settings class that loads and validates environment
variables. It uses Pydantic BaseSettings for type validation and default value
handling.
"""

from __future__ import annotations

import sys

from pydantic import Field, ValidationError, ConfigDict, field_validator
from pydantic_settings import BaseSettings

from dateutil import tz


class Settings(BaseSettings):
    """
    Pipeline settings loaded from environment variables.

    Every field can be overridden with a ``BOXWALL_NEWS_`` prefixed variable,
    either in the process environment or in a ``.env`` file.
    """

    # Source Configuration
    source_url: str = Field(
        default="https://boxwall.no/blogg",
        description="Blog page that is scraped for news articles"
    )
    image_base_url: str = Field(
        default="https://static.wixstatic.com/media",
        description="Asset host that lazy-image URIs are joined to"
    )

    # HTTP Configuration
    fetch_timeout_seconds: float = Field(
        default=30.0,
        ge=1.0,
        le=300.0,
        description="Timeout (in seconds) for the blog page request"
    )
    user_agent: str = Field(
        default="BoxWallNews/1.0 (+https://boxwall.no)",
        description="User-Agent header sent with the blog page request"
    )

    # Date Configuration
    date_timezone: str = Field(
        default="Europe/Oslo",
        description="Zone that published dates on the blog are interpreted in"
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )
    log_json: bool = Field(
        default=True,
        description="Render log events as JSON (False for human-readable console output)"
    )

    model_config = ConfigDict(
        env_prefix="BOXWALL_NEWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("source_url", "image_base_url")
    @classmethod
    def _require_http_url(cls, value: str) -> str:
        if not value.startswith(("http://", "https://")):
            raise ValueError("must be an absolute http(s) URL")
        return value

    @field_validator("date_timezone")
    @classmethod
    def _require_known_zone(cls, value: str) -> str:
        if tz.gettz(value) is None:
            raise ValueError(f"unknown time zone: {value}")
        return value


def get_settings() -> Settings:
    """
    Get pipeline settings instance.

    Returns:
        Settings: Validated pipeline settings

    Raises:
        ValidationError: If environment variables are invalid
    """
    try:
        return Settings()
    except ValidationError as e:
        print(f"Configuration validation error: {e}", file=sys.stderr)
        raise
