from __future__ import annotations

from fastapi import APIRouter, Depends

from database_locks.api.v1.endpoints import locks
from database_locks.core.security import require_lock_admin


api_router = APIRouter(dependencies=[Depends(require_lock_admin)])

api_router.include_router(locks.router, prefix="/locks", tags=["locks"])
