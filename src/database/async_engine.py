"""Async database engine and session management.

The engine and session factory are created once per running application
(web.app lifespan) and stored on app.state; nothing here keeps module-level
state. SQLite uses NullPool, PostgreSQL a QueuePool.
"""

from __future__ import annotations

import logging
from typing import AsyncGenerator, Optional

from fastapi import Request
from sqlalchemy import event, text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.pool import NullPool

from config.database import DatabaseSettings, get_database_settings

logger = logging.getLogger(__name__)


def create_engine(settings: Optional[DatabaseSettings] = None) -> AsyncEngine:
    """
    Create an async SQLAlchemy engine.

    Args:
        settings: Database settings. If None, loads from environment.

    Returns:
        AsyncEngine: Configured async engine instance.
    """
    settings = settings or get_database_settings()

    logger.info(
        "Creating async database engine",
        extra={
            "driver": settings.driver,
            "database": settings.name if settings.is_postgres else str(settings.sqlite_path),
        }
    )

    if settings.is_sqlite:
        pool_kwargs = {"poolclass": NullPool}
    else:
        # create_async_engine picks AsyncAdaptedQueuePool by default
        pool_kwargs = {
            "pool_size": settings.pool_size,
            "max_overflow": settings.max_overflow,
            "pool_timeout": settings.pool_timeout,
            "pool_recycle": settings.pool_recycle,
            "pool_pre_ping": settings.pool_pre_ping,
        }

    engine = create_async_engine(
        settings.async_url,
        echo=settings.echo_sql,
        connect_args=settings.get_connect_args(),
        **pool_kwargs,
    )

    _setup_engine_events(engine, settings)

    return engine


def _setup_engine_events(engine: AsyncEngine, settings: DatabaseSettings) -> None:
    """
    Set up SQLAlchemy engine event listeners.

    Args:
        engine: The async engine instance.
        settings: Database settings.
    """
    sync_engine = engine.sync_engine

    @event.listens_for(sync_engine, "connect")
    def on_connect(dbapi_connection, connection_record):
        """Called when a new connection is established."""
        logger.debug("Database connection established")

        if settings.is_sqlite:
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            # WAL lets readers proceed while a capacity write is in flight
            cursor.execute("PRAGMA journal_mode=WAL")
            cursor.execute("PRAGMA synchronous=NORMAL")
            cursor.close()


def get_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """
    Create an async session factory bound to an engine.

    Args:
        engine: The async engine instance.

    Returns:
        async_sessionmaker: Factory for creating async sessions.
    """
    return async_sessionmaker(
        bind=engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


async def get_async_session(request: Request) -> AsyncGenerator[AsyncSession, None]:
    """
    FastAPI dependency yielding a request-scoped session.

    The session factory is taken from app.state (set by the lifespan).
    Uncommitted work is rolled back when the session closes.
    """
    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with session_factory() as session:
        yield session


async def check_database_connection(engine: AsyncEngine) -> bool:
    """
    Check if the database is accessible.

    Args:
        engine: The async engine instance.

    Returns:
        bool: True if database is accessible, False otherwise.
    """
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Database connection check passed")
        return True
    except (SQLAlchemyError, OSError) as e:
        logger.error(f"Database connection check failed: {e}")
        return False


async def init_database(engine: AsyncEngine, settings: Optional[DatabaseSettings] = None) -> None:
    """
    Initialize the database (create tables if needed for SQLite).

    PostgreSQL schemas are managed outside the application.

    Args:
        engine: The async engine instance.
        settings: Optional database settings.
    """
    settings = settings or get_database_settings()

    if settings.is_sqlite:
        logger.info("Initializing SQLite database")

        from database.models import Base

        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        logger.info("SQLite database initialized")
    else:
        logger.info("PostgreSQL detected - schema is managed externally")


async def close_database(engine: AsyncEngine) -> None:
    """
    Dispose of the engine and its pooled connections.

    Should be called during application shutdown.
    """
    logger.info("Closing database engine")
    await engine.dispose()
    logger.info("Database engine closed")


class DatabaseHealth:
    """Database health check utility."""

    def __init__(self, engine: AsyncEngine, settings: Optional[DatabaseSettings] = None):
        self.engine = engine
        self.settings = settings or get_database_settings()

    async def check(self) -> dict:
        """
        Perform a database health check.

        Returns:
            dict: Health check result with status and details.
        """
        try:
            async with self.engine.connect() as conn:
                result = await conn.execute(text("SELECT 1"))
                result.fetchone()
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"Database health check failed: {e}")
            return {
                "status": "unhealthy",
                "error": type(e).__name__,
            }

        return {
            "status": "healthy",
            "database": self.settings.name if self.settings.is_postgres else "sqlite",
            "driver": self.settings.driver,
        }
