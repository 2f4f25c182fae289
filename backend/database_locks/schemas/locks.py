from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict


class LockOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str
    value: str
    ttl: int
    locked_at: datetime
    expires_at: datetime | None


class LockReleaseOut(BaseModel):
    released: bool


class LockReapOut(BaseModel):
    removed: int
