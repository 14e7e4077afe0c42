"""OTP issuer — builds fresh, validated OTP records for the store."""

from __future__ import annotations

from collections.abc import Callable

import pydantic
from pydantic import EmailStr, TypeAdapter

from otp_auth.config import Settings, settings as default_settings
from otp_auth.exceptions import ValidationError
from otp_auth.models.otp import OtpRecord
from otp_auth.services.codegen import compute_expiry, current_timestamp, generate_code

_email_adapter = TypeAdapter(EmailStr)


def normalize_email(email: str) -> str:
    """Trim and lower-case *email*, rejecting malformed addresses."""
    normalized = email.strip().lower()
    try:
        _email_adapter.validate_python(normalized)
    except pydantic.ValidationError as exc:
        raise ValidationError(
            f"invalid email address {email!r}", public_message="invalid email address"
        ) from exc
    return normalized


class OtpIssuer:
    """Creates transient ``OtpRecord`` instances; persistence is the store's job.

    Parameters
    ----------
    config:
        Settings providing the default validity window.
    code_factory:
        Source of new codes. Defaults to :func:`generate_code`.
    """

    def __init__(
        self,
        config: Settings | None = None,
        code_factory: Callable[[], int] = generate_code,
    ) -> None:
        self._config = config or default_settings
        self._code_factory = code_factory

    @property
    def validity_minutes(self) -> int:
        return self._config.otp_validity_minutes

    def new_record(
        self,
        email: str,
        validity_minutes: int | None = None,
        now: int | None = None,
    ) -> OtpRecord:
        """Return an unsaved, live record for *email* issued at *now*."""
        normalized = normalize_email(email)
        issued_at = current_timestamp() if now is None else now
        minutes = self.validity_minutes if validity_minutes is None else validity_minutes
        expired_at = compute_expiry(issued_at, minutes)

        return OtpRecord(
            email=normalized,
            code=self._code_factory(),
            is_used=False,
            created_at=issued_at,
            expired_at=expired_at,
        )
