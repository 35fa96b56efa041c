"""Settings management for the query gateway."""

from functools import lru_cache
from typing import Dict

from pydantic import Field, field_validator

from .database import DatabaseConfig
from .logging import LoggingConfig


class Settings(
    DatabaseConfig,
    LoggingConfig,
):
    """Combined settings for the query gateway."""

    # Service-specific settings
    service_name: str = "query-gateway"

    # Backend services
    query_api_base: str = Field(
        default="http://127.0.0.1:9966",
        description="Base URL of the query (graph) service",
    )
    dashboard_api_base: str = Field(
        default="http://127.0.0.1:8081",
        description="Base URL of the dashboard service",
    )

    # Outbound request settings
    proxy_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for each outbound backend request",
    )

    @field_validator("query_api_base", "dashboard_api_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")

    def get_backends_config(self) -> Dict[str, str]:
        """Get backend base URLs keyed by backend name."""
        return {
            "query": self.query_api_base,
            "dashboard": self.dashboard_api_base,
        }


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def reload_settings() -> Settings:
    """Reload settings (clear cache and create new instance)."""
    get_settings.cache_clear()
    return get_settings()
