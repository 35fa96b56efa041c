"""Logging configuration for the query gateway."""

from typing import Dict, List
from pydantic import Field, field_validator
from .base import BaseConfig


class LoggingConfig(BaseConfig):
    """How the gateway writes its structured logs."""

    log_level: str = Field(default="INFO", description="Root level for gateway loggers")
    json_logging: bool = Field(
        default=True,
        description="Render JSON lines outside development; console output otherwise",
    )

    # Third-party loggers are noisy at INFO
    logger_levels: Dict[str, str] = Field(
        default={
            "uvicorn.access": "INFO",
            "sqlalchemy.engine": "WARNING",
            "httpx": "WARNING",
            "httpcore": "WARNING",
            "asyncpg": "WARNING",
        },
        description="Per-logger level overrides",
    )

    # Keys redacted wherever they appear in a log event, matched by substring
    sensitive_fields: List[str] = Field(
        default=["authorization", "cookie", "password", "token", "secret", "api_key"],
        description="Log event keys whose values are redacted",
    )

    @field_validator("log_level")
    @classmethod
    def _upper_level(cls, value: str) -> str:
        return value.upper()

    @property
    def log_format(self) -> str:
        """Renderer used by structlog."""
        if self.json_logging and not self.is_development:
            return "json"
        return "console"
