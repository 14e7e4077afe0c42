"""Code and expiry generation for one-time passwords."""

from __future__ import annotations

import secrets
import time

from otp_auth.exceptions import ClockError

CODE_MIN = 100_000
CODE_MAX = 999_999


def generate_code() -> int:
    """Return a uniformly drawn 6-digit code in ``[CODE_MIN, CODE_MAX]``."""
    return CODE_MIN + secrets.randbelow(CODE_MAX - CODE_MIN + 1)


def current_timestamp() -> int:
    """Whole seconds since the epoch."""
    return int(time.time())


def compute_expiry(now: int, validity_minutes: int) -> int:
    """Return the instant *validity_minutes* after *now*.

    Raises ``ClockError`` when the result would not lie strictly after
    *now*; a zero or negative window is a configuration fault, not
    something to truncate.
    """
    expired_at = now + int(validity_minutes) * 60
    if expired_at <= now:
        raise ClockError(
            f"expiry {expired_at} is not after issue time {now} "
            f"(validity_minutes={validity_minutes!r})"
        )
    return expired_at
