from __future__ import annotations

from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_LOCK_TTL_SECONDS = 30
DEFAULT_LOCK_PRIORITY = 95
DEFAULT_LOCK_POLL_INTERVAL_SECONDS = 0.01


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(".env", "../.env"),
        env_file_encoding="utf-8",
        extra="ignore",
    )

    database_url: str = Field(..., alias="DATABASE_URL")

    # Namespaces lock names so unrelated deployments sharing one table never collide.
    lock_secret: str = Field(..., alias="LOCK_SECRET")
    lock_ttl_seconds: int = Field(DEFAULT_LOCK_TTL_SECONDS, ge=0, alias="LOCK_TTL_SECONDS")
    lock_priority: int = Field(DEFAULT_LOCK_PRIORITY, alias="LOCK_PRIORITY")
    lock_poll_interval_seconds: float = Field(
        DEFAULT_LOCK_POLL_INTERVAL_SECONDS,
        gt=0,
        alias="LOCK_POLL_INTERVAL_SECONDS",
    )

    lock_admin_username: str = Field(..., alias="LOCK_ADMIN_USERNAME")
    lock_admin_password: str = Field(..., alias="LOCK_ADMIN_PASSWORD")

    cors_origins: str | None = Field(None, alias="CORS_ORIGINS")

    @field_validator("lock_secret", mode="before")
    @classmethod
    def _normalize_lock_secret(cls, v: object) -> object:
        if isinstance(v, str):
            secret = v.strip()
            if not secret:
                raise ValueError("LOCK_SECRET must not be empty")
            return secret
        return v

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _normalize_cors_origins(cls, v: object) -> object:
        if v is None:
            return None
        if isinstance(v, str):
            origins = v.strip()
            return origins or None
        return v

    @property
    def cors_origins_list(self) -> list[str]:
        if not self.cors_origins:
            return []
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


@lru_cache
def get_settings() -> Settings:
    return Settings()
