"""Async engine and session factory for the offers store.

The compare-and-swap in OfferRepository relies on READ COMMITTED: a writer
that blocks on the row lock re-evaluates ``version = :expected_version``
against the committed row once the lock is released. The isolation level is
pinned here rather than left to the server default.
"""
import logging
from collections.abc import AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings

logger = logging.getLogger(__name__)


class Base(DeclarativeBase):
    """Declarative base for the offer and listing ORM reference models."""


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    isolation_level="READ COMMITTED",
    pool_size=settings.DB_POOL_SIZE,
    max_overflow=settings.DB_MAX_OVERFLOW,
    pool_pre_ping=True,
)

# expire_on_commit=False: the guard returns domain objects built before commit
async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: one session per request.

    The session never auto-commits. The engine and guard own every commit and
    rollback, so a request that only reads leaves nothing behind.
    """
    async with async_session_factory() as session:
        yield session


async def check_database() -> None:
    """Fail fast at startup when the offers store is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
    logger.info("Database reachable")
