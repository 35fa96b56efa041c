"""
Database Connection Management

Async engine and session management for the host inventory store.
"""

import logging
from typing import Optional, AsyncGenerator
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from shared.config import DatabaseConfig
from .models.base import Base

logger = logging.getLogger(__name__)


class DatabaseManager:
    """Owns the async engine and hands out sessions."""

    def __init__(self, config: DatabaseConfig):
        self.config = config
        self.async_engine: Optional[AsyncEngine] = None
        self.async_session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    async def initialize(self) -> None:
        """Create the engine and session factory.

        No connection is opened here: the inventory store may be down at
        startup and the forwarding routes must still come up.
        """
        if self._initialized:
            return

        self.async_engine = create_async_engine(
            self.config.database_url,
            **self.config.get_engine_config(),
        )
        self.async_session_factory = async_sessionmaker(
            bind=self.async_engine,
            class_=AsyncSession,
            **self.config.get_session_config(),
        )
        self._initialized = True
        logger.info("Database engine initialized")

    async def close(self) -> None:
        """Dispose of the engine and its pooled connections."""
        if self.async_engine is not None:
            await self.async_engine.dispose()
            logger.info("Database engine disposed")
        self.async_engine = None
        self.async_session_factory = None
        self._initialized = False

    @asynccontextmanager
    async def get_async_session(self) -> AsyncGenerator[AsyncSession, None]:
        """Get asynchronous database session."""
        if not self.async_session_factory:
            raise RuntimeError("Database not initialized")

        async with self.async_session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def create_tables(self) -> None:
        """Create all mapped tables. Used by tests and local setups."""
        if not self.async_engine:
            raise RuntimeError("Database not initialized")

        async with self.async_engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("Database tables created")

    async def check_health(self) -> bool:
        """Return True when a trivial query succeeds."""
        if not self.async_engine:
            return False
        try:
            async with self.async_engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except Exception as e:
            logger.warning("Database health check failed: %s", e)
            return False
