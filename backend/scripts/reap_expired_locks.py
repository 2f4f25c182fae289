from __future__ import annotations

import asyncio
import logging
import os
import sys
from pathlib import Path

from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

# Script entrypoint: ensure `backend/` is importable.
BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

from database_locks.services.lock_reaper import reap_expired_locks  # noqa: E402
from database_locks.services.lock_store import SqlLockStore  # noqa: E402


async def _main() -> int:
    url = os.environ.get("DATABASE_URL")
    if not url:
        print("DATABASE_URL is required.", file=sys.stderr)
        return 2

    engine = create_async_engine(url, pool_pre_ping=True)
    try:
        store = SqlLockStore(async_sessionmaker(bind=engine, expire_on_commit=False))
        removed = await reap_expired_locks(store)
    finally:
        await engine.dispose()

    print(f"Removed {removed} expired lock(s).")
    return 0


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO, format="%(levelname)s [%(name)s] %(message)s")
    raise SystemExit(asyncio.run(_main()))
