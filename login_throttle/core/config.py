from __future__ import annotations

from pydantic import Field

from pydantic_settings import BaseSettings, SettingsConfigDict

from login_throttle.services.delay_policy import DEFAULT_TIERS


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8")

    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"

    DATABASE_URL: str = "sqlite+aiosqlite:///./login_throttle.db"
    DB_POOL_SIZE: int = 5
    DB_MAX_OVERFLOW: int = 10
    DB_POOL_TIMEOUT: float = 10.0
    DB_POOL_RECYCLE: int = 1800

    # (threshold attempts, delay seconds), ascending
    THROTTLE_TIERS: list[tuple[int, int]] = Field(
        default_factory=lambda: list(DEFAULT_TIERS)
    )
    THROTTLE_STORE_TIMEOUT_SEC: float | None = 5.0


settings = Settings()
