import os

os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("SESSION_SECRET", "test-session-secret")
os.environ.setdefault("WORKOUT_PASSWORD", "test-password")
os.environ.setdefault("FF_ADMIN_ALERTS", "false")

import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from iron_log.db import repo
from iron_log.db.models import Base


@pytest_asyncio.fixture
async def db():
    """Fresh in-memory database wired into the repository module."""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:", echo=False, poolclass=StaticPool
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    repo._engine = engine
    repo._session = async_sessionmaker(engine, expire_on_commit=False)
    try:
        yield repo._session
    finally:
        repo._engine = None
        repo._session = None
        await engine.dispose()
