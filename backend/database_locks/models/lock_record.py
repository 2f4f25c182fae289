from __future__ import annotations

from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from database_locks.models.base import Base


class LockRecord(Base):
    __tablename__ = "database_locks"
    # Uniqueness on `name` alone; a (name, value) pair would let two holders in at once.
    __table_args__ = (
        UniqueConstraint("name", name="uq_database_locks_name"),
        CheckConstraint("ttl >= 0", name="ck_database_locks_ttl_non_negative"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    value: Mapped[str] = mapped_column(String(255), nullable=False)
    ttl: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    locked_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True, index=True)
