from __future__ import annotations

import asyncio
import unicodedata
from collections.abc import Awaitable, Callable
from typing import TypeVar

import structlog

from login_throttle.schemas.throttle import LoginDecision
from login_throttle.services.attempt_store import AttemptRecord, AttemptStore
from login_throttle.services.delay_policy import DelayPolicy
from login_throttle.services.errors import InvalidIdentifier, StoreUnavailable
from login_throttle.utils.time import epoch_seconds, to_datetime

logger = structlog.get_logger(__name__)

MAX_IDENTIFIER_LENGTH = 255

T = TypeVar("T")


def validate_identifier(identifier: object) -> str:
    if not isinstance(identifier, str) or not identifier.strip():
        raise InvalidIdentifier("Identifier must be a non-empty string")
    if len(identifier) > MAX_IDENTIFIER_LENGTH:
        raise InvalidIdentifier(
            f"Identifier exceeds {MAX_IDENTIFIER_LENGTH} characters"
        )
    if any(unicodedata.category(char) == "Cc" for char in identifier):
        raise InvalidIdentifier("Identifier contains control characters")
    return identifier


class ThrottleGuard:
    """Decides whether a login attempt may proceed for an identifier.

    The authentication flow calls ``evaluate`` before checking credentials,
    ``record_failure`` exactly once per failed check and ``reset`` after a
    successful login. Store failures are raised to the caller as-is; whether
    to fail open or closed is the caller's decision.
    """

    def __init__(
        self,
        store: AttemptStore,
        policy: DelayPolicy | None = None,
        *,
        clock: Callable[[], int] = epoch_seconds,
        timeout: float | None = None,
    ) -> None:
        self.store = store
        self.policy = policy or DelayPolicy()
        self.clock = clock
        self.timeout = timeout

    async def evaluate(self, identifier: str) -> LoginDecision:
        """Return whether ``identifier`` may attempt a login now.

        A stored ``last_attempt_at`` later than the clock's current time is
        treated as a failure that just happened, so ``wait_seconds`` never
        exceeds the delay of the record's tier.
        """
        identifier = validate_identifier(identifier)
        record = await self._call("get", self.store.get(identifier))
        if record is None or record.failed_attempts < 1:
            return LoginDecision.allow()

        delay = self.policy.delay(record.failed_attempts)
        now = self.clock()
        # A timestamp from the future counts as "just now".
        elapsed = max(0, now - record.last_attempt_at)
        if elapsed >= delay:
            return LoginDecision.allow()

        wait_seconds = delay - elapsed
        logger.info(
            "login_throttled",
            identifier=identifier,
            failed_attempts=record.failed_attempts,
            wait_seconds=wait_seconds,
        )
        return LoginDecision(
            allowed=False,
            wait_seconds=wait_seconds,
            retry_at=to_datetime(now + wait_seconds),
        )

    async def record_failure(self, identifier: str) -> AttemptRecord:
        identifier = validate_identifier(identifier)
        record = await self._call(
            "increment", self.store.increment(identifier, self.clock())
        )
        log = logger.warning if self.policy.is_top_tier(record.failed_attempts) else logger.info
        log(
            "login_failure_recorded",
            identifier=identifier,
            failed_attempts=record.failed_attempts,
            delay_seconds=self.policy.delay(record.failed_attempts),
        )
        return record

    async def reset(self, identifier: str) -> None:
        identifier = validate_identifier(identifier)
        await self._call("delete", self.store.delete(identifier))
        logger.info("login_attempts_reset", identifier=identifier)

    async def _call(self, operation: str, pending: Awaitable[T]) -> T:
        if self.timeout is None:
            return await pending
        try:
            return await asyncio.wait_for(pending, self.timeout)
        except asyncio.TimeoutError as exc:
            logger.warning("attempt_store_timeout", operation=operation, timeout=self.timeout)
            raise StoreUnavailable(
                f"Attempt store {operation} timed out after {self.timeout}s"
            ) from exc
