from login_throttle.models.base import Base
from login_throttle.models.login_attempt import LoginAttempt

__all__ = [
    "Base",
    "LoginAttempt",
]
