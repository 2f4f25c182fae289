from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any

from alembic.config import Config
from alembic.script import ScriptDirectory
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import inspect, text

from database_locks.api.v1.router import api_router
from database_locks.core.config import get_settings
from database_locks.core.db import get_engine
from database_locks.models.lock_record import LockRecord


@lru_cache
def _repo_head_revision() -> str | None:
    default_alembic_path = Path(__file__).resolve().parents[1] / "alembic.ini"
    alembic_path = Path(os.getenv("ALEMBIC_CONFIG_PATH", str(default_alembic_path)))
    if not alembic_path.exists():
        return None

    cfg = Config(str(alembic_path))
    cfg.set_main_option("script_location", str(alembic_path.parent / "alembic"))
    script = ScriptDirectory.from_config(cfg)
    return script.get_current_head()


def create_app() -> FastAPI:
    """Admin API over the lock table. Run with `uvicorn --factory database_locks.main:create_app`."""
    settings = get_settings()
    app = FastAPI(title="Database Locks", version="1.0")

    if settings.cors_origins_list:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins_list,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.get("/healthz")
    async def healthz() -> dict[str, str]:
        return {"status": "ok"}

    @app.get("/healthz/deep")
    async def deep_healthz() -> JSONResponse:
        payload: dict[str, Any] = {
            "status": "ok",
            "checks": {
                "database": "ok",
            },
        }
        try:
            async with get_engine().connect() as conn:
                await conn.execute(text("SELECT 1"))
                has_lock_table = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).has_table(LockRecord.__tablename__)
                )
                has_alembic_version = await conn.run_sync(
                    lambda sync_conn: inspect(sync_conn).has_table("alembic_version")
                )
                current_revision: str | None = None
                if has_alembic_version:
                    current_revision = await conn.scalar(text("SELECT version_num FROM alembic_version LIMIT 1"))
        except Exception as exc:
            payload["status"] = "error"
            payload["checks"]["database"] = "error"
            payload["error"] = f"{exc.__class__.__name__}: {exc}"
            return JSONResponse(status_code=503, content=payload)

        repo_head = _repo_head_revision()
        if not has_lock_table:
            migration_state = "missing_lock_table"
        elif not has_alembic_version:
            # Table created through `Base.metadata.create_all`.
            migration_state = "unmanaged"
        elif repo_head is None:
            migration_state = "unknown_repo_head"
        elif current_revision == repo_head:
            migration_state = "up_to_date"
        else:
            migration_state = "behind_head"

        payload["checks"]["migration"] = {
            "state": migration_state,
            "has_lock_table": has_lock_table,
            "has_alembic_version": has_alembic_version,
            "current_revision": current_revision,
            "repo_head_revision": repo_head,
        }

        healthy = migration_state in {"up_to_date", "unmanaged"}
        payload["status"] = "ok" if healthy else "degraded"
        return JSONResponse(status_code=200 if healthy else 503, content=payload)

    app.include_router(api_router, prefix="/api/v1")
    return app
