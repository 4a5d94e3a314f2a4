from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

ONE_WEEK_SECONDS = 86400 * 7

DEFAULT_TIERS: tuple[tuple[int, int], ...] = (
    (5, 20),
    # Anyone past ten failures is treated as an automated attacker.
    (10, ONE_WEEK_SECONDS),
)


@dataclass(frozen=True)
class DelayTier:
    threshold: int
    delay_seconds: int


class DelayPolicy:
    """Step function mapping a failed-attempt count to a required wait.

    Tiers are ``(threshold, delay_seconds)`` pairs: once the count reaches a
    threshold, that tier's delay applies until the next threshold is reached.
    Below the first threshold no delay is required.
    """

    def __init__(self, tiers: Iterable[tuple[int, int]] = DEFAULT_TIERS) -> None:
        self.tiers = tuple(DelayTier(int(t), int(d)) for t, d in tiers)
        _validate(self.tiers)

    def delay(self, failed_attempts: int) -> int:
        seconds = 0
        for tier in self.tiers:
            if failed_attempts < tier.threshold:
                break
            seconds = tier.delay_seconds
        return seconds

    def is_top_tier(self, failed_attempts: int) -> bool:
        return bool(self.tiers) and failed_attempts >= self.tiers[-1].threshold

    def __repr__(self) -> str:
        pairs = ", ".join(f"({t.threshold}, {t.delay_seconds})" for t in self.tiers)
        return f"DelayPolicy([{pairs}])"


def _validate(tiers: tuple[DelayTier, ...]) -> None:
    previous: DelayTier | None = None
    for tier in tiers:
        if tier.threshold < 1:
            raise ValueError(f"Tier threshold must be positive, got {tier.threshold}")
        if tier.delay_seconds < 0:
            raise ValueError(f"Tier delay must be non-negative, got {tier.delay_seconds}")
        if previous is not None:
            if tier.threshold <= previous.threshold:
                raise ValueError("Tier thresholds must be strictly ascending")
            if tier.delay_seconds < previous.delay_seconds:
                raise ValueError("Tier delays must be non-decreasing")
        previous = tier
