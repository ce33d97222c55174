"""Email service for sending account emails via SMTP."""

from __future__ import annotations

import logging
from email.message import EmailMessage
from html import escape
from typing import TYPE_CHECKING

from app.core.config import Settings, settings

if TYPE_CHECKING:
    from app.models.user import User

logger = logging.getLogger(__name__)


def _display_name(user: User) -> str:
    """First name, or the email address when the user has none."""
    return str(user.first_name or user.email)


class EmailService:
    """Service for sending transactional emails via SMTP."""

    def __init__(self, config: Settings | None = None):
        self.settings = config if config is not None else settings

    async def send_email(self, to: str, subject: str, html_body: str) -> bool:
        """Send an email via SMTP.

        Args:
            to: Recipient email address.
            subject: Email subject line.
            html_body: HTML content of the email.

        Returns:
            True if sent successfully (or no-op when SMTP unconfigured).
        """
        if not self.settings.SMTP_HOST:
            logger.info("SMTP not configured, skipping email to %s: %s", to, subject)
            return True

        import aiosmtplib

        msg = EmailMessage()
        msg["From"] = f"{self.settings.SMTP_FROM_NAME} <{self.settings.SMTP_FROM_EMAIL}>"
        msg["To"] = to
        msg["Subject"] = subject
        msg.set_content("Please view this email in an HTML-capable client.")
        msg.add_alternative(html_body, subtype="html")

        await aiosmtplib.send(
            msg,
            hostname=self.settings.SMTP_HOST,
            port=self.settings.SMTP_PORT,
            username=self.settings.SMTP_USERNAME or None,
            password=self.settings.SMTP_PASSWORD or None,
            start_tls=self.settings.SMTP_USE_TLS,
        )
        logger.info("Email sent to %s: %s", to, subject)
        return True

    async def send_verification_email(self, user: User, verification_url: str) -> bool:
        """Send the link that confirms ownership of the user's email address."""
        subject = f"Verify your email for {self.settings.APP_NAME}"
        html_body = (
            f"<h2>Verify your email</h2>"
            f"<p>Hi {escape(_display_name(user))},</p>"
            f"<p>Please confirm your email address by following the link below. "
            f"The link expires in {self.settings.EMAIL_VERIFICATION_TTL_HOURS} hours.</p>"
            f'<p><a href="{escape(verification_url)}">Verify email</a></p>'
            f"<p>If you did not create an account, you can ignore this email.</p>"
        )
        return await self.send_email(to=str(user.email), subject=subject, html_body=html_body)

    async def send_welcome_email(self, user: User) -> bool:
        """Send the welcome email that follows a successful verification."""
        subject = "Welcome! Your email has been verified"
        html_body = (
            f"<h2>Welcome to {escape(self.settings.APP_NAME)}</h2>"
            f"<p>Hi {escape(_display_name(user))},</p>"
            f"<p>Your email address {escape(str(user.email))} has been verified.</p>"
            f"<p>You can now sign in to your account.</p>"
        )
        return await self.send_email(to=str(user.email), subject=subject, html_body=html_body)
