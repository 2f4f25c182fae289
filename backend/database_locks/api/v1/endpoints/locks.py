from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException

from database_locks.core.security import require_lock_admin
from database_locks.schemas.locks import LockOut, LockReapOut, LockReleaseOut
from database_locks.services.lock_reaper import reap_expired_locks
from database_locks.services.lock_store import LockStore, default_lock_store


logger = logging.getLogger(__name__)

router = APIRouter()


def get_lock_store() -> LockStore:
    return default_lock_store()


@router.get("", response_model=list[LockOut])
async def list_locks_endpoint(store: LockStore = Depends(get_lock_store)) -> list[LockOut]:
    rows = await store.list_locks()
    return [LockOut.model_validate(r) for r in rows]


@router.post("/reap", response_model=LockReapOut)
async def reap_locks_endpoint(
    store: LockStore = Depends(get_lock_store),
    actor: str = Depends(require_lock_admin),
) -> LockReapOut:
    removed = await reap_expired_locks(store)
    logger.info("Expired lock reap triggered by %s removed %s rows", actor, removed)
    return LockReapOut(removed=removed)


@router.get("/{name:path}", response_model=LockOut)
async def get_lock_endpoint(name: str, store: LockStore = Depends(get_lock_store)) -> LockOut:
    row = await store.get_lock(name)
    if row is None:
        raise HTTPException(status_code=404, detail="Lock not found")
    return LockOut.model_validate(row)


@router.delete("/{name:path}", response_model=LockReleaseOut)
async def force_release_lock_endpoint(
    name: str,
    store: LockStore = Depends(get_lock_store),
    actor: str = Depends(require_lock_admin),
) -> LockReleaseOut:
    # Unconditional by name: evicts whoever currently holds it.
    removed = await store.delete(name)
    if removed:
        logger.info("Lock %s force-released by %s", name, actor)
    return LockReleaseOut(released=removed > 0)
