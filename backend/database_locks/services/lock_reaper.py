from __future__ import annotations

import logging
from datetime import datetime

from database_locks.services.lock_store import LockStore, utcnow


logger = logging.getLogger(__name__)


async def reap_expired_locks(store: LockStore, *, now: datetime | None = None) -> int:
    """
    Delete lock rows whose recorded TTL has run out.

    The acquire path never expires rows on its own; a holder that crashed before
    releasing keeps its row until this runs. Rows stored with `ttl == 0` never expire.
    """
    removed = await store.delete_expired(now or utcnow())
    if removed > 0:
        logger.info("Reaped %s expired database locks", removed)
    return removed
