from sqlalchemy import BigInteger, CheckConstraint, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from login_throttle.models.base import Base


class LoginAttempt(Base):
    __tablename__ = "attempts"
    __table_args__ = (
        CheckConstraint("failed_attempts >= 0", name="ck_attempts_failed_non_negative"),
    )

    identifier: Mapped[str] = mapped_column(String(255), primary_key=True)
    failed_attempts: Mapped[int] = mapped_column(Integer, default=0, nullable=False)
    last_attempt_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
