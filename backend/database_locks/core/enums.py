from __future__ import annotations

import enum


class LockCapability(enum.IntFlag):
    EXCLUSIVE = 1
    SHARED = 2
    NOBLOCK = 4
