"""Email service — sends OTP confirmation emails via async SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage

import aiosmtplib

from otp_auth.config import Settings, settings as default_settings
from otp_auth.exceptions import MailError

logger = logging.getLogger(__name__)


class EmailService:
    """Sends transactional emails using the configured SMTP server."""

    def __init__(self, config: Settings | None = None) -> None:
        self._config = config or default_settings

    def build_confirmation(self, to_address: str, code: str) -> EmailMessage:
        """Render the confirmation message carrying *code*."""
        app_name = self._config.app_name
        minutes = self._config.otp_validity_minutes
        body = (
            "Hello,\n\n"
            f"Your {app_name} verification code is: {code}\n\n"
            f"The code expires in {minutes} minutes and can be used once.\n\n"
            "If you did not request this code, you can ignore this email.\n\n"
            "Best regards,\n"
            f"The {app_name} Team"
        )
        html = (
            "<p>Hello,</p>"
            f"<p>Your {app_name} verification code is:</p>"
            f'<p style="font-size:28px;font-weight:700;letter-spacing:2px">{code}</p>'
            f"<p>The code expires in {minutes} minutes and can be used once.</p>"
        )

        msg = EmailMessage()
        msg["Subject"] = "Confirm your email"
        msg["From"] = self._config.email_from
        msg["To"] = to_address
        msg.set_content(body)
        msg.add_alternative(html, subtype="html")
        return msg

    async def send_confirmation(self, to_address: str, code: str) -> None:
        """Send the OTP confirmation email.

        Parameters
        ----------
        to_address:
            Recipient email address.
        code:
            The one-time password to deliver.

        Raises ``MailError`` if the SMTP exchange fails.
        """
        msg = self.build_confirmation(to_address, code)
        logger.info("Sending confirmation email to %s", to_address)

        try:
            await aiosmtplib.send(
                msg,
                hostname=self._config.smtp_host,
                port=self._config.smtp_port,
                username=self._config.smtp_username or None,
                password=self._config.smtp_password or None,
                start_tls=self._config.smtp_start_tls,
            )
        except (aiosmtplib.SMTPException, OSError) as exc:
            logger.error("Failed to send confirmation email to %s: %s", to_address, exc)
            raise MailError(f"failed to send confirmation email to {to_address}") from exc

        logger.info("Confirmation email sent to %s", to_address)
