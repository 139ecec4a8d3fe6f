"""
Core utilities for the BoxWall news pipeline.

Configuration management and structured logging shared by every component.
"""

from .config import Settings, get_settings
from .logging import (
    add_correlation_id,
    configure_logging,
    generate_correlation_id,
    get_logger,
    log_exception,
)

__all__ = [
    # Configuration
    "Settings",
    "get_settings",
    # Logging
    "add_correlation_id",
    "configure_logging",
    "generate_correlation_id",
    "get_logger",
    "log_exception",
]
