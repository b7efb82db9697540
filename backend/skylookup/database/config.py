"""
Async database configuration and connection management.

This module provides the persistent store engine with support for:
- SQLite through aiosqlite (default, and in-memory for tests)
- PostgreSQL through asyncpg

Server databases get a bounded connection pool that queues callers once
``pool_size + max_overflow`` connections are checked out.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Dict, Optional

from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import StaticPool

from ..utils.config import AppConfig
from ..utils.errors import InternalFailure
from .models import create_all_tables, drop_all_tables

logger = logging.getLogger(__name__)


def get_async_database_url(url: str) -> str:
    """Convert a sync database URL to its async driver form."""
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if url.startswith("sqlite:///"):
        return url.replace("sqlite:///", "sqlite+aiosqlite:///", 1)
    return url


class DatabaseConfig:
    """
    Async engine and session factory for the persistent store.

    The engine is created lazily by ``initialize`` and released by
    ``dispose``; both are driven by the service container lifecycle.
    """

    def __init__(
        self,
        database_url: str,
        echo: bool = False,
        pool_size: int = 10,
        max_overflow: int = 20,
        pool_timeout: int = 30,
    ):
        """
        Initialize database configuration.

        Args:
            database_url: SQLAlchemy URL, sync URLs are mapped to async drivers
            echo: Enable SQL query logging for debugging
            pool_size: Base size of the server connection pool
            max_overflow: Connections allowed beyond pool_size
            pool_timeout: Seconds a caller queues for a connection
        """
        self.database_url = get_async_database_url(database_url)
        self.echo = echo
        self.pool_size = pool_size
        self.max_overflow = max_overflow
        self.pool_timeout = pool_timeout
        self.engine: Optional[AsyncEngine] = None
        self.session_factory: Optional[async_sessionmaker[AsyncSession]] = None
        self._is_initialized = False

        self.db_type = self._detect_database_type()
        self.engine_kwargs = self._get_engine_kwargs()

        logger.info(f"Database configuration initialized for {self.db_type}")

    @classmethod
    def from_app_config(cls, config: AppConfig) -> "DatabaseConfig":
        return cls(
            database_url=config.database_url,
            echo=config.debug,
            pool_size=config.db_pool_size,
            max_overflow=config.db_max_overflow,
            pool_timeout=config.db_pool_timeout,
        )

    @property
    def is_memory(self) -> bool:
        return self.db_type == "sqlite" and (
            ":memory:" in self.database_url or self.database_url.endswith("://")
        )

    def _detect_database_type(self) -> str:
        """Detect database type from URL."""
        if self.database_url.startswith("sqlite"):
            return "sqlite"
        elif self.database_url.startswith("postgresql"):
            return "postgresql"
        else:
            return "unknown"

    def _get_engine_kwargs(self) -> Dict[str, Any]:
        """
        Get database-specific engine configuration.

        Returns:
            Dictionary of engine configuration parameters
        """
        kwargs: Dict[str, Any] = {"echo": self.echo}

        if self.db_type == "sqlite":
            kwargs["connect_args"] = {"check_same_thread": False}
            if self.is_memory:
                # One shared connection, otherwise every checkout sees an empty database
                kwargs["poolclass"] = StaticPool
        else:
            kwargs.update({
                "pool_size": self.pool_size,
                "max_overflow": self.max_overflow,
                "pool_timeout": self.pool_timeout,
                "pool_recycle": 3600,
                "pool_pre_ping": True,
            })

        return kwargs

    async def initialize(self) -> None:
        """
        Initialize database engine and session factory.

        Raises:
            InternalFailure: If database connection fails
        """
        if self._is_initialized:
            return

        try:
            self.engine = create_async_engine(self.database_url, **self.engine_kwargs)
            self._setup_event_listeners()

            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))

            self.session_factory = async_sessionmaker(
                self.engine,
                class_=AsyncSession,
                expire_on_commit=False,
                autoflush=False,
            )

            self._is_initialized = True
            logger.info(f"Database engine initialized successfully ({self.db_type})")

        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Failed to initialize database: {e}")
            raise InternalFailure() from e

    def _setup_event_listeners(self) -> None:
        """Set up SQLAlchemy event listeners for connection management."""

        @event.listens_for(self.engine.sync_engine, "connect")
        def set_sqlite_pragma(dbapi_connection, connection_record):
            if self.db_type == "sqlite":
                cursor = dbapi_connection.cursor()
                cursor.execute("PRAGMA foreign_keys=ON")
                cursor.close()

    async def create_tables(self) -> None:
        """Create all database tables if they don't exist."""
        await self.initialize()
        async with self.engine.begin() as conn:
            await conn.run_sync(create_all_tables)
        logger.info("Database tables created successfully")

    async def drop_tables(self) -> None:
        """Drop all database tables."""
        await self.initialize()
        async with self.engine.begin() as conn:
            await conn.run_sync(drop_all_tables)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[AsyncSession]:
        """
        Get a database session with automatic cleanup.

        Usage:
            async with db_config.session() as session:
                ...

        Yields:
            AsyncSession, rolled back if the block raises
        """
        await self.initialize()
        async with self.session_factory() as session:
            try:
                yield session
            except Exception:
                await session.rollback()
                raise

    async def test_connection(self) -> bool:
        """
        Test database connectivity with a trivial query.

        Returns:
            True if connection successful, False otherwise
        """
        try:
            await self.initialize()
            async with self.engine.connect() as conn:
                await conn.execute(text("SELECT 1"))
            return True
        except (SQLAlchemyError, InternalFailure) as e:
            logger.error(f"Database connection test failed: {e}")
            return False

    async def dispose(self) -> None:
        """Close database connections and clean up resources."""
        if self.engine:
            await self.engine.dispose()
            logger.info("Database connections closed")
        self.engine = None
        self.session_factory = None
        self._is_initialized = False
