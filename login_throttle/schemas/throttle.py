from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

LOGIN_ALLOWED = 0
LOGIN_DENIED = -1


class LoginDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    allowed: bool
    wait_seconds: int = Field(default=0, ge=0)
    retry_at: datetime | None = None

    @classmethod
    def allow(cls) -> "LoginDecision":
        return cls(allowed=True)

    @property
    def status(self) -> int:
        return LOGIN_ALLOWED if self.allowed else LOGIN_DENIED

    @property
    def message(self) -> str | None:
        # Denials always resolve on their own; never phrase them as a ban.
        if self.allowed:
            return None
        unit = "second" if self.wait_seconds == 1 else "seconds"
        return f"Too many failed login attempts. Try again in {self.wait_seconds} {unit}."
