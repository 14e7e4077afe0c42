"""Tests for the EmailService — SMTP transport is always mocked."""

from unittest.mock import AsyncMock, patch

import aiosmtplib
import pytest

from otp_auth.config import Settings
from otp_auth.exceptions import MailError
from otp_auth.services.email_service import EmailService


@pytest.fixture
def email_service() -> EmailService:
    return EmailService(
        Settings(
            smtp_host="smtp.example.com",
            smtp_port=2525,
            smtp_username="mailer",
            smtp_password="hunter2",
            email_from="noreply@example.com",
            app_name="Acme",
        )
    )


def test_build_confirmation_contains_code(email_service):
    msg = email_service.build_confirmation("user@example.com", "482913")

    assert msg["To"] == "user@example.com"
    assert msg["From"] == "noreply@example.com"
    assert msg["Subject"] == "Confirm your email"
    assert "482913" in msg.get_body(preferencelist=("plain",)).get_content()
    assert "482913" in msg.get_body(preferencelist=("html",)).get_content()


@pytest.mark.asyncio
async def test_send_confirmation_uses_configured_smtp(email_service):
    with patch("otp_auth.services.email_service.aiosmtplib.send", new=AsyncMock()) as send:
        await email_service.send_confirmation("user@example.com", "482913")

    send.assert_awaited_once()
    kwargs = send.await_args.kwargs
    assert kwargs["hostname"] == "smtp.example.com"
    assert kwargs["port"] == 2525
    assert kwargs["username"] == "mailer"
    assert kwargs["password"] == "hunter2"
    assert kwargs["start_tls"] is True


@pytest.mark.asyncio
async def test_send_confirmation_wraps_smtp_failure(email_service):
    failing = AsyncMock(side_effect=aiosmtplib.SMTPConnectError("refused"))
    with patch("otp_auth.services.email_service.aiosmtplib.send", new=failing):
        with pytest.raises(MailError):
            await email_service.send_confirmation("user@example.com", "482913")
