"""
Database Configuration for Amy

Async SQLAlchemy engine and session management.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from sqlalchemy.ext.asyncio import (
    AsyncSession,
    create_async_engine,
    async_sessionmaker,
    AsyncEngine,
)
from sqlalchemy import text

from amy.config.settings import settings
from amy.infrastructure.exceptions import ConfigurationError


def normalize_database_url(database_url: str) -> str:
    """Force the asyncpg driver for plain postgres URLs."""
    if database_url.startswith("postgresql://"):
        return database_url.replace("postgresql://", "postgresql+asyncpg://", 1)
    if database_url.startswith("postgres://"):
        return database_url.replace("postgres://", "postgresql+asyncpg://", 1)
    return database_url


class DatabaseManager:
    """Lazily builds the async engine and session factory from settings."""

    def __init__(self) -> None:
        self._engine: Optional[AsyncEngine] = None
        self._session_factory: Optional[async_sessionmaker[AsyncSession]] = None

    @property
    def engine(self) -> AsyncEngine:
        if self._engine is None:
            self._initialize_engine()
        return self._engine

    @property
    def session_factory(self) -> async_sessionmaker[AsyncSession]:
        if self._session_factory is None:
            self._initialize_engine()
        return self._session_factory

    def _initialize_engine(self) -> None:
        if not settings.database_url:
            raise ConfigurationError(
                "DATABASE_URL is not configured",
                missing_keys=["DATABASE_URL"],
            )

        database_url = normalize_database_url(settings.database_url)
        engine_kwargs = {"echo": settings.database_echo}
        if not database_url.startswith("sqlite"):
            engine_kwargs.update(
                pool_size=settings.database_pool_size,
                max_overflow=settings.database_max_overflow,
                pool_timeout=settings.database_pool_timeout,
                pool_pre_ping=True,  # Verify connections before use
            )

        self._engine = create_async_engine(database_url, **engine_kwargs)
        self._session_factory = async_sessionmaker(
            bind=self._engine,
            class_=AsyncSession,
            expire_on_commit=False,
            autoflush=False,
        )

    async def close(self) -> None:
        if self._engine:
            await self._engine.dispose()
            self._engine = None
            self._session_factory = None


# One engine (and connection pool) per process
_db_manager: Optional[DatabaseManager] = None


def get_db_manager() -> DatabaseManager:
    global _db_manager
    if _db_manager is None:
        _db_manager = DatabaseManager()
    return _db_manager


@asynccontextmanager
async def get_session_context() -> AsyncGenerator[AsyncSession, None]:
    """
    Unit-of-work session: commit on clean exit, roll back on error.

    Background notification work opens its own through this, never the
    request's session.
    """
    async with get_db_manager().session_factory() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency wrapping get_session_context around one request."""
    async with get_session_context() as session:
        yield session


async def init_db() -> None:
    """Open the pool and check connectivity on startup."""
    async with get_db_manager().session_factory() as session:
        await session.execute(text("SELECT 1"))


async def close_db() -> None:
    await get_db_manager().close()
