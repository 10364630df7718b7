"""Async database engine and session factory."""

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

from fit_tracker.core.config import Settings


def create_engine_for(settings: Settings) -> AsyncEngine:
    """Engine for the configured URL. Pool sizing only applies to PostgreSQL."""
    url = settings.async_database_url
    kwargs: dict = {"echo": settings.debug, "pool_pre_ping": True}
    if url.startswith("postgresql"):
        kwargs["pool_size"] = settings.database_pool_size
        kwargs["max_overflow"] = settings.database_max_overflow
    return create_async_engine(url, **kwargs)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
