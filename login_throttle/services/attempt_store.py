from __future__ import annotations

import asyncio
import threading
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from sqlalchemy import delete
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from login_throttle.models.login_attempt import LoginAttempt
from login_throttle.services.errors import StoreUnavailable

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}


@dataclass(frozen=True)
class AttemptRecord:
    identifier: str
    failed_attempts: int
    last_attempt_at: int


@runtime_checkable
class AttemptStore(Protocol):
    """Keyed storage of failed-attempt records.

    Every operation is atomic with respect to other operations on the same
    identifier. ``increment`` is the read-increment-write primitive and must
    not lose updates under concurrent calls.
    """

    async def get(self, identifier: str) -> AttemptRecord | None: ...

    async def upsert(
        self, identifier: str, failed_attempts: int, last_attempt_at: int
    ) -> None: ...

    async def increment(self, identifier: str, at: int) -> AttemptRecord: ...

    async def delete(self, identifier: str) -> None: ...


class MemoryAttemptStore:
    """Process-local store. Suitable for a single worker or for tests."""

    def __init__(self) -> None:
        self._records: dict[str, AttemptRecord] = {}
        self._lock = threading.Lock()

    async def get(self, identifier: str) -> AttemptRecord | None:
        with self._lock:
            return self._records.get(identifier)

    async def upsert(
        self, identifier: str, failed_attempts: int, last_attempt_at: int
    ) -> None:
        if failed_attempts < 0:
            raise ValueError("failed_attempts must be non-negative")
        with self._lock:
            self._records[identifier] = AttemptRecord(
                identifier, failed_attempts, last_attempt_at
            )

    async def increment(self, identifier: str, at: int) -> AttemptRecord:
        with self._lock:
            current = self._records.get(identifier)
            count = current.failed_attempts + 1 if current else 1
            record = AttemptRecord(identifier, count, at)
            self._records[identifier] = record
            return record

    async def delete(self, identifier: str) -> None:
        with self._lock:
            self._records.pop(identifier, None)


class SqlAttemptStore:
    """Store backed by the ``attempts`` table.

    Writes go through ``INSERT ... ON CONFLICT DO UPDATE`` so that increments
    happen inside the database in a single statement.
    """

    def __init__(self, engine: AsyncEngine) -> None:
        dialect = engine.dialect.name
        if dialect not in _UPSERT_INSERTS:
            raise ValueError(f"Unsupported database dialect for attempt store: {dialect}")
        self._insert = _UPSERT_INSERTS[dialect]
        self._sessions = async_sessionmaker(engine, expire_on_commit=False)

    @asynccontextmanager
    async def _session(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session:
                yield session
        except (SQLAlchemyError, OSError, asyncio.TimeoutError) as exc:
            raise StoreUnavailable(f"Attempt store failure: {exc}") from exc

    async def get(self, identifier: str) -> AttemptRecord | None:
        async with self._session() as session:
            row = await session.get(LoginAttempt, identifier)
            if row is None:
                return None
            return AttemptRecord(row.identifier, row.failed_attempts, row.last_attempt_at)

    async def upsert(
        self, identifier: str, failed_attempts: int, last_attempt_at: int
    ) -> None:
        if failed_attempts < 0:
            raise ValueError("failed_attempts must be non-negative")
        stmt = self._insert(LoginAttempt).values(
            identifier=identifier,
            failed_attempts=failed_attempts,
            last_attempt_at=last_attempt_at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["identifier"],
            set_={
                "failed_attempts": stmt.excluded.failed_attempts,
                "last_attempt_at": stmt.excluded.last_attempt_at,
            },
        )
        async with self._session() as session:
            await session.execute(stmt)
            await session.commit()

    async def increment(self, identifier: str, at: int) -> AttemptRecord:
        stmt = self._insert(LoginAttempt).values(
            identifier=identifier,
            failed_attempts=1,
            last_attempt_at=at,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=["identifier"],
            set_={
                "failed_attempts": LoginAttempt.failed_attempts + 1,
                "last_attempt_at": stmt.excluded.last_attempt_at,
            },
        ).returning(LoginAttempt.failed_attempts, LoginAttempt.last_attempt_at)
        async with self._session() as session:
            result = await session.execute(stmt)
            failed_attempts, last_attempt_at = result.one()
            await session.commit()
        return AttemptRecord(identifier, failed_attempts, last_attempt_at)

    async def delete(self, identifier: str) -> None:
        async with self._session() as session:
            await session.execute(
                delete(LoginAttempt).where(LoginAttempt.identifier == identifier)
            )
            await session.commit()
