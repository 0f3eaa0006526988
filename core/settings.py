from __future__ import annotations

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def _truthy(value, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if value is None or value == "":
        return default
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


class PortalSettings(BaseSettings):
    """Centralized application configuration pulled from environment/.env."""

    secret_key: str = Field("dev-secret", alias="SECRET_KEY")
    # Empty password keeps the app bootable; admin login simply always fails.
    admin_password: str = Field("", alias="ADMIN_PASSWORD")
    database_url: Optional[str] = Field(None, alias="DATABASE_URL")
    auto_apply_ddl: bool = Field(True, alias="PORTAL_AUTO_APPLY_DDL")
    enforce_alembic_migrations: bool = Field(False, alias="PORTAL_ENFORCE_ALEMBIC")
    admin_token_ttl: int = Field(7200, alias="ADMIN_TOKEN_TTL")
    employee_token_ttl: int = Field(7200, alias="EMPLOYEE_TOKEN_TTL")
    # Build/meta info
    app_version: str = Field("dev", alias="APP_VERSION")
    git_sha: Optional[str] = Field(None, alias="GIT_SHA")
    build_ts: Optional[str] = Field(None, alias="BUILD_TS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("secret_key", mode="before")
    @classmethod
    def _normalize_secret(cls, value: str | None) -> str:
        val = (value or "dev-secret").strip()
        return val or "dev-secret"

    @field_validator("admin_password", mode="before")
    @classmethod
    def _strip_admin_password(cls, value: str | None) -> str:
        return (value or "").strip()

    @field_validator("database_url", mode="before")
    @classmethod
    def _strip_database_url(cls, value: str | None) -> Optional[str]:
        if isinstance(value, str):
            return value.strip() or None
        return value

    @field_validator("auto_apply_ddl", mode="before")
    @classmethod
    def _parse_auto_ddl(cls, value) -> bool:
        return _truthy(value, True)

    @field_validator("enforce_alembic_migrations", mode="before")
    @classmethod
    def _parse_enforce(cls, value) -> bool:
        return _truthy(value, False)

    @field_validator("admin_token_ttl", "employee_token_ttl", mode="before")
    @classmethod
    def _parse_ttl(cls, value) -> int:
        try:
            ttl = int(value)
        except (TypeError, ValueError):
            return 7200
        return ttl if ttl > 0 else 7200


@lru_cache(maxsize=1)
def get_settings() -> PortalSettings:
    return PortalSettings()


def reset_settings_cache() -> None:
    """Testing helper to clear cached settings."""
    get_settings.cache_clear()
