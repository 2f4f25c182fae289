from __future__ import annotations

import pytest
from pydantic import ValidationError

from database_locks.core.config import Settings


def _base_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
    monkeypatch.setenv("LOCK_SECRET", "secret")
    monkeypatch.setenv("LOCK_ADMIN_USERNAME", "user")
    monkeypatch.setenv("LOCK_ADMIN_PASSWORD", "pass")
    for name in ("LOCK_TTL_SECONDS", "LOCK_PRIORITY", "LOCK_POLL_INTERVAL_SECONDS", "CORS_ORIGINS"):
        monkeypatch.delenv(name, raising=False)


def test_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    _base_env(monkeypatch)
    settings = Settings(_env_file=None)

    assert settings.lock_ttl_seconds == 30
    assert settings.lock_priority == 95
    assert settings.lock_poll_interval_seconds == pytest.approx(0.01)
    assert settings.cors_origins_list == []


def test_settings_rejects_blank_secret(monkeypatch: pytest.MonkeyPatch) -> None:
    _base_env(monkeypatch)
    monkeypatch.setenv("LOCK_SECRET", "   ")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_settings_rejects_negative_ttl(monkeypatch: pytest.MonkeyPatch) -> None:
    _base_env(monkeypatch)
    monkeypatch.setenv("LOCK_TTL_SECONDS", "-5")
    with pytest.raises(ValidationError):
        Settings(_env_file=None)


def test_settings_splits_cors_origins(monkeypatch: pytest.MonkeyPatch) -> None:
    _base_env(monkeypatch)
    monkeypatch.setenv("CORS_ORIGINS", "http://a.test, http://b.test,")
    settings = Settings(_env_file=None)
    assert settings.cors_origins_list == ["http://a.test", "http://b.test"]
