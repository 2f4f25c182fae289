from __future__ import annotations

import asyncio
import hashlib
import logging
import time
import uuid
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from types import TracebackType

from database_locks.core.config import (
    DEFAULT_LOCK_POLL_INTERVAL_SECONDS,
    DEFAULT_LOCK_PRIORITY,
    DEFAULT_LOCK_TTL_SECONDS,
    Settings,
)
from database_locks.core.enums import LockCapability
from database_locks.services.lock_store import LockConflictError, LockError, LockStore, default_lock_store


logger = logging.getLogger(__name__)

LOCK_NAMESPACE = "DATABASE_LOCKING"


class LockAcquireError(LockError):
    pass


class LockWouldBlockError(LockAcquireError):
    pass


class InsufficientCapabilityError(LockAcquireError):
    pass


def lock_key_prefix(secret: str) -> str:
    return hashlib.sha1(f"{secret}:{LOCK_NAMESPACE}".encode("utf-8")).hexdigest()


def lock_name(secret: str, subject: str) -> str:
    return f"{lock_key_prefix(secret)}:lock:name:{subject}"


def new_lock_value() -> str:
    return uuid.uuid4().hex


class DatabaseLock:
    """
    Exclusive lock backed by a row in the lock table.

    The row's presence means "held". Its `value` is a token unique to this handle,
    which lets a retry recognise its own row. Use it as a scope:

        async with DatabaseLock("invoice-export", secret=settings.lock_secret):
            ...

    A blocking acquire polls the table until the row disappears, for at most
    `max(1, ttl)` seconds per wait.
    """

    def __init__(
        self,
        subject: str,
        *,
        secret: str,
        store: LockStore | None = None,
        ttl: int | None = None,
        poll_interval: float | None = None,
    ) -> None:
        if not subject:
            raise ValueError("Lock subject must not be empty")
        ttl = DEFAULT_LOCK_TTL_SECONDS if ttl is None else int(ttl)
        if ttl < 0:
            raise ValueError("Lock ttl must be >= 0")
        poll_interval = DEFAULT_LOCK_POLL_INTERVAL_SECONDS if poll_interval is None else float(poll_interval)
        if poll_interval <= 0:
            raise ValueError("Lock poll interval must be > 0")

        self.subject = subject
        self.name = lock_name(secret, subject)
        self.value = new_lock_value()
        self.ttl = ttl
        self._poll_interval = poll_interval
        self._store = store if store is not None else default_lock_store()
        self._acquired = False

    @classmethod
    def from_settings(cls, subject: str, settings: Settings, *, store: LockStore | None = None) -> "DatabaseLock":
        return cls(
            subject,
            secret=settings.lock_secret,
            store=store,
            ttl=settings.lock_ttl_seconds,
            poll_interval=settings.lock_poll_interval_seconds,
        )

    @staticmethod
    def capabilities() -> LockCapability:
        return LockCapability.EXCLUSIVE | LockCapability.NOBLOCK

    @staticmethod
    def priority(settings: Settings | None = None) -> int:
        if settings is None:
            return DEFAULT_LOCK_PRIORITY
        return settings.lock_priority

    def __repr__(self) -> str:
        return f"<DatabaseLock subject={self.subject!r} acquired={self._acquired}>"

    def is_acquired(self) -> bool:
        return self._acquired

    async def acquire(self, mode: LockCapability = LockCapability.EXCLUSIVE) -> bool:
        if self._acquired:
            return True

        if not mode & LockCapability.EXCLUSIVE:
            raise InsufficientCapabilityError("Could not acquire lock due to insufficient capabilities.")

        if mode & LockCapability.NOBLOCK:
            self._acquired = await self._claim()
            if not self._acquired:
                raise LockWouldBlockError("Could not acquire exclusive lock (non-blocking).")
        else:
            # Another holder may grab the row between the release we observed and our insert.
            while not (acquired := await self._claim()):
                if not await self._wait_for_release():
                    raise LockAcquireError("Could not acquire exclusive lock (blocking+exclusive).")
            self._acquired = acquired

        logger.debug("Acquired lock %s", self.subject)
        return self._acquired

    async def release(self) -> bool:
        if not self._acquired:
            return True

        removed = await self._store.delete(self.name, self.value)
        if removed == 0:
            logger.warning("Lock %s was no longer held by this handle on release", self.subject)
        else:
            logger.debug("Released lock %s", self.subject)
        self._acquired = False
        return not self._acquired

    async def destroy(self) -> None:
        await self.release()

    @asynccontextmanager
    async def locked(self, mode: LockCapability = LockCapability.EXCLUSIVE) -> AsyncIterator["DatabaseLock"]:
        await self.acquire(mode)
        try:
            yield self
        finally:
            await self.release()

    async def __aenter__(self) -> "DatabaseLock":
        await self.acquire()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.release()

    async def _claim(self) -> bool:
        try:
            return await self._try_lock()
        except BaseException:
            # The insert may have committed before the error or cancellation reached us.
            try:
                await asyncio.shield(self._store.delete(self.name, self.value))
            except Exception:
                logger.exception("Could not remove lock row %s after a failed acquire", self.subject)
            raise

    async def _try_lock(self) -> bool:
        try:
            await self._store.insert(self.name, self.value, self.ttl)
            return True
        except LockConflictError:
            return await self._store.fetch_value(self.name) == self.value

    async def _wait_for_release(self) -> bool:
        """Return True once the row is gone, False if it outlived the wait budget."""
        deadline = time.monotonic() + max(1, self.ttl)
        while time.monotonic() < deadline:
            if await self._store.fetch_value(self.name) is None:
                return True
            await asyncio.sleep(self._poll_interval)
        return False
