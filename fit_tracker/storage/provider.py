"""Backend selection and per-request storage handles."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from fit_tracker.core.config import Settings
from fit_tracker.core.enums import StorageBackend
from fit_tracker.db import create_engine_for, create_session_maker
from fit_tracker.db.base import Base
from fit_tracker.storage.base import Storage
from fit_tracker.storage.memory import MemoryStorage
from fit_tracker.storage.seed import seed_defaults
from fit_tracker.storage.sql import SqlStorage

logger = logging.getLogger(__name__)


class StorageProvider(ABC):
    """Hands out a Storage for one unit of work."""

    backend: StorageBackend

    @abstractmethod
    def session(self) -> AbstractAsyncContextManager[Storage]:
        """Storage for one unit of work; committed on clean exit."""

    async def ping(self) -> None:
        """Raise when the backend cannot serve requests."""
        return None

    async def dispose(self) -> None:
        return None


class MemoryStorageProvider(StorageProvider):
    backend = StorageBackend.MEMORY

    def __init__(self, storage: MemoryStorage | None = None) -> None:
        self.storage = storage or MemoryStorage()

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Storage]:
        yield self.storage


class SqlStorageProvider(StorageProvider):
    backend = StorageBackend.POSTGRES

    def __init__(self, engine: AsyncEngine, session_maker: async_sessionmaker[AsyncSession] | None = None) -> None:
        self.engine = engine
        self.session_maker = session_maker or create_session_maker(engine)

    @asynccontextmanager
    async def session(self) -> AsyncIterator[Storage]:
        async with self.session_maker() as session:
            try:
                yield SqlStorage(session)
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    async def ping(self) -> None:
        await _ping(self.engine)

    async def create_tables(self) -> None:
        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    async def dispose(self) -> None:
        await self.engine.dispose()


async def _ping(engine: AsyncEngine) -> None:
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))


async def open_sql_provider(settings: Settings) -> SqlStorageProvider:
    engine = create_engine_for(settings)
    try:
        await _ping(engine)
    except Exception:
        await engine.dispose()
        raise
    provider = SqlStorageProvider(engine)
    if settings.create_tables:
        await provider.create_tables()
    return provider


async def init_storage(settings: Settings) -> StorageProvider:
    """Pick the backend from settings, create tables and seed defaults as configured."""
    backend = StorageBackend(settings.storage_backend.lower())
    provider: StorageProvider

    if backend == StorageBackend.MEMORY:
        provider = MemoryStorageProvider()
    elif backend == StorageBackend.POSTGRES:
        provider = await open_sql_provider(settings)
    elif not settings.database_configured:
        logger.warning("No database configured, using in-memory storage")
        provider = MemoryStorageProvider()
    else:
        try:
            provider = await open_sql_provider(settings)
        except (SQLAlchemyError, OSError) as e:
            logger.warning("Database unavailable (%s), falling back to in-memory storage", e)
            provider = MemoryStorageProvider()

    logger.info("Storage backend: %s", provider.backend.value)
    if settings.seed_defaults:
        async with provider.session() as storage:
            await seed_defaults(storage)
    return provider
