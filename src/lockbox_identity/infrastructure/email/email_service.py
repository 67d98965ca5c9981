"""SMTP implementation of the EmailDispatcher port."""

import asyncio
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional
from urllib.parse import quote

from lockbox_config.settings import Settings
from lockbox_identity.application.ports import EmailDispatcher
from lockbox_identity.exceptions import EmailDeliveryError
from lockbox_identity.infrastructure.email import templates
from lockbox_identity.infrastructure.email.templates import EmailTemplate

logger = logging.getLogger(__name__)


class SmtpEmailDispatcher(EmailDispatcher):
    """Send account emails through SMTP.

    Delivery problems are reported as ``False`` and never raised to the
    caller. With SMTP disabled, messages are logged and reported as sent so
    development setups work without a mail server.
    """

    def __init__(self, settings: Settings):
        self._settings = settings

    async def send_verification(self, email: str, token: str) -> bool:
        return await self._deliver(
            email,
            templates.VERIFICATION,
            link=self._link("verify-email", token),
        )

    async def send_password_reset(self, email: str, token: str) -> bool:
        return await self._deliver(
            email,
            templates.PASSWORD_RESET,
            link=self._link("reset-password", token),
        )

    async def send_deletion_confirmation(self, email: str, token: str) -> bool:
        return await self._deliver(
            email,
            templates.DELETION_CONFIRMATION,
            link=self._link("confirm-account-deletion", token),
        )

    async def send_deletion_completed_notice(self, email: str) -> bool:
        return await self._deliver(email, templates.DELETION_COMPLETED)

    def _link(self, path: str, token: str) -> str:
        base = self._settings.public_base_url.rstrip("/")
        return f"{base}/{path}?token={quote(token, safe='')}"

    async def _deliver(
        self,
        to_email: str,
        template: EmailTemplate,
        link: Optional[str] = None,
    ) -> bool:
        if not self._settings.smtp_enabled:
            logger.warning(
                "SMTP disabled, skipping '%s' email to %s",
                template.subject,
                to_email,
            )
            return True

        text_body, html_body = template.render(
            link=link or "",
            app_name=self._settings.app_name,
        )
        message = self._create_message(
            to_email=to_email,
            subject=template.subject,
            text_body=text_body,
            html_body=html_body,
        )

        try:
            await asyncio.to_thread(self._send_email, to_email, message)
        except EmailDeliveryError as e:
            logger.error("Failed to send email to %s: %s", to_email, e.message)
            return False

        logger.info("Email sent to %s", to_email)
        return True

    def _create_message(
        self,
        to_email: str,
        subject: str,
        text_body: str,
        html_body: str | None = None,
    ) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{self._settings.smtp_from_name} <{self._settings.smtp_from_email}>"
        msg["To"] = to_email

        msg.attach(MIMEText(text_body, "plain"))
        if html_body:
            msg.attach(MIMEText(html_body, "html"))

        return msg

    def _send_email(self, to_email: str, message: MIMEMultipart) -> None:
        settings = self._settings
        if not settings.smtp_host:
            msg = "SMTP host not configured"
            raise EmailDeliveryError(msg)

        smtp_password = (
            settings.smtp_password.get_secret_value() if settings.smtp_password else ""
        )

        try:
            if settings.smtp_use_tls and not settings.smtp_starttls:
                # Implicit TLS
                with smtplib.SMTP_SSL(
                    settings.smtp_host,
                    settings.smtp_port,
                    context=ssl.create_default_context(),
                ) as server:
                    if settings.smtp_user:
                        server.login(settings.smtp_user, smtp_password)
                    server.send_message(message)
            else:
                with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
                    if settings.smtp_starttls:
                        server.starttls(context=ssl.create_default_context())
                    if settings.smtp_user:
                        server.login(settings.smtp_user, smtp_password)
                    server.send_message(message)
        except (smtplib.SMTPException, OSError) as e:
            msg = f"SMTP delivery to {to_email} failed: {e}"
            raise EmailDeliveryError(msg) from e
