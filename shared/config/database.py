"""Database configuration for the query gateway."""

from typing import Optional
from pydantic import Field, computed_field
from pydantic_core import MultiHostUrl
from .base import BaseConfig


class DatabaseConfig(BaseConfig):
    """Database configuration settings for the host inventory store."""

    # Database connection settings
    db_scheme: str = Field(default="postgresql+asyncpg", description="Database scheme")
    db_host: str = Field(default="localhost", description="Database host")
    db_port: int = Field(default=5432, description="Database port")
    db_user: str = Field(default="falcon", description="Database username")
    db_password: str = Field(default="falcon", description="Database password")
    db_name: str = Field(default="falcon_portal", description="Database name")
    db_url: Optional[str] = Field(
        default=None,
        description="Full database URL, overrides the individual connection fields",
    )

    # Connection pool settings
    db_pool_size: int = Field(default=5, description="Database connection pool size")
    db_max_overflow: int = Field(default=10, description="Database max overflow connections")
    db_pool_timeout: int = Field(default=30, description="Database pool timeout in seconds")
    db_pool_recycle: int = Field(default=3600, description="Database pool recycle time in seconds")

    # Logging settings
    db_echo: bool = Field(default=False, description="Enable database query logging")

    @computed_field
    @property
    def database_url(self) -> str:
        """Build database URL from components."""
        if self.db_url:
            return self.db_url
        return str(
            MultiHostUrl.build(
                scheme=self.db_scheme,
                username=self.db_user,
                password=self.db_password,
                host=self.db_host,
                port=self.db_port,
                path=self.db_name,
            )
        )

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")

    def get_engine_config(self) -> dict:
        """Get SQLAlchemy engine configuration."""
        config = {"echo": self.db_echo}

        # SQLite engines manage their own pool
        if not self.is_sqlite:
            config.update(
                {
                    "pool_size": self.db_pool_size,
                    "max_overflow": self.db_max_overflow,
                    "pool_timeout": self.db_pool_timeout,
                    "pool_recycle": self.db_pool_recycle,
                    "pool_pre_ping": True,
                }
            )

        return config

    def get_session_config(self) -> dict:
        """Get SQLAlchemy session configuration."""
        return {
            "expire_on_commit": False,
            "autoflush": False,
        }
