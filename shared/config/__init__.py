"""Configuration management for the query gateway."""

from .base import BaseConfig
from .database import DatabaseConfig
from .logging import LoggingConfig
from .settings import Settings, get_settings, reload_settings

__all__ = [
    "BaseConfig",
    "DatabaseConfig",
    "LoggingConfig",
    "Settings",
    "get_settings",
    "reload_settings",
]
