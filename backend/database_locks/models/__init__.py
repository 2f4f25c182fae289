from database_locks.models.lock_record import LockRecord

__all__ = [
    "LockRecord",
]
