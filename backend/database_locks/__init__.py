from database_locks.core.enums import LockCapability
from database_locks.services.lock_store import LockConflictError, LockStore, SqlLockStore
from database_locks.services.locking import (
    DatabaseLock,
    InsufficientCapabilityError,
    LockAcquireError,
    LockError,
    LockWouldBlockError,
    lock_name,
)

__all__ = [
    "DatabaseLock",
    "InsufficientCapabilityError",
    "LockAcquireError",
    "LockCapability",
    "LockConflictError",
    "LockError",
    "LockStore",
    "LockWouldBlockError",
    "SqlLockStore",
    "lock_name",
]
