from __future__ import annotations

from datetime import UTC, datetime, timedelta
from typing import Protocol

from sqlalchemy import delete, insert, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from database_locks.models.lock_record import LockRecord


# PostgreSQL `unique_violation`.
_UNIQUE_VIOLATION_SQLSTATE = "23505"
_SQLITE_UNIQUE_ERRORNAME = "SQLITE_CONSTRAINT_UNIQUE"
_SQLITE_UNIQUE_MESSAGE_PREFIX = "UNIQUE constraint failed"
# MySQL `ER_DUP_ENTRY`.
_MYSQL_DUP_ENTRY_ERRNO = 1062


class LockError(RuntimeError):
    pass


class LockConflictError(LockError):
    pass


def utcnow() -> datetime:
    return datetime.now(UTC)


class LockStore(Protocol):
    async def insert(self, name: str, value: str, ttl: int) -> None: ...

    async def fetch_value(self, name: str) -> str | None: ...

    async def delete(self, name: str, value: str | None = None) -> int: ...

    async def list_locks(self) -> list[LockRecord]: ...

    async def get_lock(self, name: str) -> LockRecord | None: ...

    async def delete_expired(self, now: datetime | None = None) -> int: ...


def _is_unique_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    for attr in ("sqlstate", "pgcode"):
        if getattr(orig, attr, None) == _UNIQUE_VIOLATION_SQLSTATE:
            return True

    errorname = getattr(orig, "sqlite_errorname", None)
    if errorname is not None:
        return errorname == _SQLITE_UNIQUE_ERRORNAME

    args = getattr(orig, "args", ())
    if args and args[0] == _MYSQL_DUP_ENTRY_ERRNO:
        return True
    # Driver adapters that drop the SQLite error code keep the engine's message.
    return str(orig).startswith(_SQLITE_UNIQUE_MESSAGE_PREFIX)


class SqlLockStore:
    """
    Lock table access on top of an async session factory.

    Each call runs in its own short transaction, so a lock row becomes visible to
    other processes as soon as `insert` returns.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def insert(self, name: str, value: str, ttl: int) -> None:
        now = utcnow()
        expires_at = now + timedelta(seconds=ttl) if ttl > 0 else None
        stmt = insert(LockRecord).values(
            name=name,
            value=value,
            ttl=ttl,
            locked_at=now,
            expires_at=expires_at,
        )
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    await session.execute(stmt)
        except IntegrityError as exc:
            if not _is_unique_violation(exc):
                raise
            raise LockConflictError(f"Lock {name!r} is already held") from exc

    async def fetch_value(self, name: str) -> str | None:
        async with self._session_factory() as session:
            return await session.scalar(select(LockRecord.value).where(LockRecord.name == name))

    async def delete(self, name: str, value: str | None = None) -> int:
        stmt = delete(LockRecord).where(LockRecord.name == name)
        if value is not None:
            stmt = stmt.where(LockRecord.value == value)
        async with self._session_factory() as session:
            async with session.begin():
                res = await session.execute(stmt)
                return int(res.rowcount or 0)

    async def list_locks(self) -> list[LockRecord]:
        async with self._session_factory() as session:
            rows = await session.execute(select(LockRecord).order_by(LockRecord.locked_at.asc(), LockRecord.id.asc()))
            return list(rows.scalars().all())

    async def get_lock(self, name: str) -> LockRecord | None:
        async with self._session_factory() as session:
            return await session.scalar(select(LockRecord).where(LockRecord.name == name))

    async def delete_expired(self, now: datetime | None = None) -> int:
        cutoff = now or utcnow()
        stmt = delete(LockRecord).where(
            LockRecord.expires_at.is_not(None),
            LockRecord.expires_at <= cutoff,
        )
        async with self._session_factory() as session:
            async with session.begin():
                res = await session.execute(stmt)
                return int(res.rowcount or 0)


def default_lock_store() -> SqlLockStore:
    from database_locks.core.db import get_session_factory

    return SqlLockStore(get_session_factory())
