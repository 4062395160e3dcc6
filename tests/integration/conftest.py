"""Integration-test fixtures.

Pre-condition: a reachable PostgreSQL at DATABASE_URL with `alembic upgrade head`
applied. Without it every integration test is skipped.

All integration tests share a single event loop so that the module-level
SQLAlchemy async engine pool (created at import time) stays valid across the
whole session.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import text
from sqlalchemy.exc import DBAPIError

from src.bs_common.database import engine
from src.main import app


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def migrated_db() -> None:
    try:
        async with engine.connect() as conn:
            found = (
                await conn.execute(text("SELECT to_regclass('public.sale_events')"))
            ).scalar_one()
    except (OSError, DBAPIError) as exc:
        pytest.skip(f"PostgreSQL not reachable: {exc}")
    if found is None:
        pytest.skip("Schema not migrated: run `alembic upgrade head`")


@pytest_asyncio.fixture(loop_scope="session", scope="session")
async def client(migrated_db: None) -> AsyncGenerator[AsyncClient, None]:
    """Session-scoped async HTTP client that keeps the engine pool alive."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac
