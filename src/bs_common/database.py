"""Async engine, session factory and declarative base shared by every bs_* module.

Ledger writes get their transaction from run_in_transaction. Master-data
routers open `db.begin()` themselves.
"""

from collections.abc import AsyncGenerator

from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


# lock_timeout bounds every row-lock wait; a timed-out wait surfaces as
# SQLSTATE 55P03 and is treated as a retryable conflict.
engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
    connect_args={"server_settings": {"lock_timeout": str(settings.LOCK_TIMEOUT_MS)}},
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session
