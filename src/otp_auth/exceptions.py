"""Error types raised by the OTP core and its collaborators."""


class OtpError(Exception):
    """Base class for every error the service raises on purpose.

    ``public_message`` is safe to hand back to a client; the full
    message (and the chained cause) is for logs only.
    """

    public_message = "internal error"

    def __init__(self, message: str, public_message: str | None = None) -> None:
        super().__init__(message)
        if public_message is not None:
            self.public_message = public_message


class ValidationError(OtpError):
    """Input rejected before any storage operation (e.g. malformed email)."""

    public_message = "invalid request"


class StorageError(OtpError):
    """The backing store failed (connectivity, lock timeout, constraint)."""

    public_message = "storage backend unavailable"


class ClockError(OtpError):
    """An expiry computation produced an instant that is not in the future."""


class MailError(OtpError):
    """The confirmation email could not be delivered."""

    public_message = "failed to send confirmation email"
