from __future__ import annotations

from sqlalchemy.engine import make_url
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine

from login_throttle.core.config import Settings, settings
from login_throttle.models.base import Base
from login_throttle.services.attempt_store import AttemptStore, SqlAttemptStore
from login_throttle.services.delay_policy import DelayPolicy
from login_throttle.services.throttle_guard import ThrottleGuard


def build_engine(url: str | None = None, config: Settings = settings) -> AsyncEngine:
    url = url or config.DATABASE_URL
    if make_url(url).get_backend_name() == "sqlite":
        return create_async_engine(url)
    return create_async_engine(
        url,
        pool_pre_ping=True,
        pool_size=config.DB_POOL_SIZE,
        max_overflow=config.DB_MAX_OVERFLOW,
        pool_timeout=config.DB_POOL_TIMEOUT,
        pool_recycle=config.DB_POOL_RECYCLE,
    )


async def init_db(engine: AsyncEngine) -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


def create_attempt_store(engine: AsyncEngine) -> SqlAttemptStore:
    return SqlAttemptStore(engine)


def create_guard(store: AttemptStore, config: Settings = settings) -> ThrottleGuard:
    return ThrottleGuard(
        store,
        DelayPolicy(config.THROTTLE_TIERS),
        timeout=config.THROTTLE_STORE_TIMEOUT_SEC,
    )
