from __future__ import annotations

import time
from datetime import datetime, timezone


def epoch_seconds() -> int:
    return int(time.time())


def to_datetime(value: int) -> datetime:
    return datetime.fromtimestamp(value, tz=timezone.utc)
