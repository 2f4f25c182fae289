from __future__ import annotations

import sys
from pathlib import Path
from collections.abc import AsyncIterator

import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

import database_locks.models  # noqa: E402,F401
from database_locks.core.config import get_settings  # noqa: E402
from database_locks.core.db import get_engine, get_session_factory  # noqa: E402
from database_locks.models.base import Base  # noqa: E402
from database_locks.services.lock_store import SqlLockStore  # noqa: E402


TEST_LOCK_SECRET = "test-encryption-key"


def _clear_caches() -> None:
    get_settings.cache_clear()
    get_session_factory.cache_clear()
    get_engine.cache_clear()


@pytest_asyncio.fixture
async def db_engine(tmp_path, monkeypatch) -> AsyncIterator[AsyncEngine]:
    db_path = tmp_path / "test.db"

    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{db_path}")
    monkeypatch.setenv("LOCK_SECRET", TEST_LOCK_SECRET)
    monkeypatch.setenv("LOCK_ADMIN_USERNAME", "test-user")
    monkeypatch.setenv("LOCK_ADMIN_PASSWORD", "test-pass")
    monkeypatch.delenv("LOCK_TTL_SECONDS", raising=False)
    monkeypatch.delenv("LOCK_PRIORITY", raising=False)
    monkeypatch.delenv("LOCK_POLL_INTERVAL_SECONDS", raising=False)
    _clear_caches()

    engine = create_async_engine(f"sqlite+aiosqlite:///{db_path}", future=True)

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()
    _clear_caches()


@pytest_asyncio.fixture
async def session_factory(db_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=db_engine, expire_on_commit=False)


@pytest_asyncio.fixture
async def lock_store(session_factory: async_sessionmaker[AsyncSession]) -> SqlLockStore:
    return SqlLockStore(session_factory)
