"""Base configuration classes for the query gateway."""

from typing import Any, Dict
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Settings every gateway process reads, from the environment or ``.env``."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="Query Gateway", description="Name reported by /health")
    app_version: str = Field(default="0.1.0", description="Version reported by /health")
    environment: str = Field(
        default="development",
        description="Deployment environment: development, test, staging or production",
    )
    debug: bool = Field(default=False, description="Reload on code changes when served by uvicorn")

    # HTTP listener
    host: str = Field(default="0.0.0.0", description="Interface the gateway binds to")
    port: int = Field(default=9967, description="Port the gateway listens on")

    # Operational endpoints
    health_check_path: str = Field(default="/health", description="Liveness endpoint path")
    metrics_path: str = Field(default="/metrics", description="Prometheus exposition path")
    enable_metrics: bool = Field(default=True, description="Expose the metrics endpoint")

    @field_validator("environment")
    @classmethod
    def _normalize_environment(cls, value: str) -> str:
        return value.strip().lower()

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    def get_service_info(self) -> Dict[str, Any]:
        """Identity block embedded in health responses."""
        return {
            "name": self.app_name,
            "version": self.app_version,
            "environment": self.environment,
        }
