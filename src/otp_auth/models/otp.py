"""SQLAlchemy OTP record model and its read-time lifecycle state."""

from __future__ import annotations

import enum

from sqlalchemy import BigInteger, Boolean, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from otp_auth.models.base import Base


class OtpState(str, enum.Enum):
    """Lifecycle state of a record as observed at a given instant.

    ``USED`` covers both a consumed code and one superseded by a resend;
    storage does not distinguish the two.
    """

    LIVE = "live"
    USED = "used"
    EXPIRED = "expired"


class OtpRecord(Base):
    """A one-time password issued to an email address.

    Records are never deleted. ``is_used`` moves from ``False`` to
    ``True`` exactly once and never back. Timestamps are whole seconds
    since the epoch.
    """

    __tablename__ = "otp"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    email: Mapped[str] = mapped_column(String(320), nullable=False)
    code: Mapped[int] = mapped_column(Integer, nullable=False)
    is_used: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[int] = mapped_column(BigInteger, nullable=False)
    expired_at: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (Index("ix_otp_email_is_used", "email", "is_used"),)

    def state(self, now: int) -> OtpState:
        """Return the lifecycle state of this record at *now*."""
        if self.is_used:
            return OtpState.USED
        if now >= self.expired_at:
            return OtpState.EXPIRED
        return OtpState.LIVE

    def __repr__(self) -> str:
        return (
            f"<OtpRecord id={self.id} email={self.email!r} "
            f"used={self.is_used} expired_at={self.expired_at}>"
        )
