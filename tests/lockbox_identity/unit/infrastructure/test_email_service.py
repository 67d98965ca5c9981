"""Unit tests for SmtpEmailDispatcher."""

import smtplib
from unittest.mock import MagicMock, patch

import pytest

from lockbox_config import Settings
from lockbox_identity.infrastructure.email import SmtpEmailDispatcher

TEST_EMAIL = "test@example.com"
TOKEN = "a+b/c=="


def _settings(**overrides) -> Settings:
    values = {
        "jwt_secret": "k" * 64,
        "smtp_enabled": True,
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "smtp_from_email": "noreply@example.com",
        "public_base_url": "https://lockbox.example.com/",
    }
    values.update(overrides)
    return Settings(**values)


def _sent_message(smtp_class: MagicMock):
    server = smtp_class.return_value.__enter__.return_value
    server.send_message.assert_called_once()
    return server.send_message.call_args[0][0]


def _plain_body(message) -> str:
    return message.get_payload()[0].get_payload(decode=True).decode()


class TestSmtpEmailDispatcher:
    """Tests for message building and delivery."""

    @pytest.mark.asyncio
    async def test_verification_link_is_percent_encoded(self):
        """The token survives URL transport intact."""
        dispatcher = SmtpEmailDispatcher(_settings())

        with patch("smtplib.SMTP") as smtp_class:
            sent = await dispatcher.send_verification(TEST_EMAIL, TOKEN)

        assert sent
        message = _sent_message(smtp_class)
        assert message["To"] == TEST_EMAIL
        body = _plain_body(message)
        assert "https://lockbox.example.com/verify-email?token=a%2Bb%2Fc%3D%3D" in body

    @pytest.mark.asyncio
    async def test_password_reset_link(self):
        dispatcher = SmtpEmailDispatcher(_settings())

        with patch("smtplib.SMTP") as smtp_class:
            await dispatcher.send_password_reset(TEST_EMAIL, "tok")

        body = _plain_body(_sent_message(smtp_class))
        assert "/reset-password?token=tok" in body
        assert "1 hour" in body

    @pytest.mark.asyncio
    async def test_deletion_confirmation_link(self):
        dispatcher = SmtpEmailDispatcher(_settings())

        with patch("smtplib.SMTP") as smtp_class:
            await dispatcher.send_deletion_confirmation(TEST_EMAIL, "tok")

        body = _plain_body(_sent_message(smtp_class))
        assert "/confirm-account-deletion?token=tok" in body

    @pytest.mark.asyncio
    async def test_starttls_and_login(self):
        dispatcher = SmtpEmailDispatcher(_settings(smtp_user="mailer", smtp_password="pw"))

        with patch("smtplib.SMTP") as smtp_class:
            await dispatcher.send_deletion_completed_notice(TEST_EMAIL)

        server = smtp_class.return_value.__enter__.return_value
        server.starttls.assert_called_once()
        server.login.assert_called_once_with("mailer", "pw")

    @pytest.mark.asyncio
    async def test_implicit_tls(self):
        dispatcher = SmtpEmailDispatcher(_settings(smtp_starttls=False, smtp_port=465))

        with patch("smtplib.SMTP_SSL") as smtp_ssl_class, patch("smtplib.SMTP") as smtp_class:
            sent = await dispatcher.send_deletion_completed_notice(TEST_EMAIL)

        assert sent
        smtp_ssl_class.assert_called_once()
        smtp_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_smtp_error_reported_as_false(self):
        """Delivery failures never raise."""
        dispatcher = SmtpEmailDispatcher(_settings())

        with patch("smtplib.SMTP") as smtp_class:
            server = smtp_class.return_value.__enter__.return_value
            server.send_message.side_effect = smtplib.SMTPRecipientsRefused({})
            sent = await dispatcher.send_verification(TEST_EMAIL, TOKEN)

        assert sent is False

    @pytest.mark.asyncio
    async def test_connection_error_reported_as_false(self):
        dispatcher = SmtpEmailDispatcher(_settings())

        with patch("smtplib.SMTP", side_effect=ConnectionRefusedError()):
            sent = await dispatcher.send_verification(TEST_EMAIL, TOKEN)

        assert sent is False

    @pytest.mark.asyncio
    async def test_missing_host_reported_as_false(self):
        dispatcher = SmtpEmailDispatcher(_settings(smtp_host=""))

        with patch("smtplib.SMTP") as smtp_class:
            sent = await dispatcher.send_verification(TEST_EMAIL, TOKEN)

        assert sent is False
        smtp_class.assert_not_called()

    @pytest.mark.asyncio
    async def test_disabled_smtp_skips_delivery(self):
        """Development mode logs instead of sending and reports success."""
        dispatcher = SmtpEmailDispatcher(_settings(smtp_enabled=False))

        with patch("smtplib.SMTP") as smtp_class:
            sent = await dispatcher.send_verification(TEST_EMAIL, TOKEN)

        assert sent
        smtp_class.assert_not_called()
