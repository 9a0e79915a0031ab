"""
Transactional email.

Messages are rendered from small HTML templates and sent over SMTP in a
worker thread. Outside production (or with `email_enabled` off) messages are
logged instead of sent and reported as delivered.
"""

import asyncio
import logging
import smtplib
from dataclasses import dataclass
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from streamflow.config import Settings, settings

logger = logging.getLogger(__name__)


@dataclass
class EmailTemplate:
    subject: str
    html: str


def verification_link(token: str, frontend_url: Optional[str] = None) -> str:
    base = (frontend_url or settings.frontend_url).rstrip("/")
    return f"{base}/verify-email?token={token}"


def verification_email(username: str, link: str, expire_hours: int) -> EmailTemplate:
    return EmailTemplate(
        subject="Verify Your StreamFlow Account",
        html=f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1>StreamFlow</h1>
  <h2>Welcome to StreamFlow, {username}!</h2>
  <p>Please verify your email address to complete your registration.</p>
  <p><a href="{link}">Verify Email Address</a></p>
  <p>If the button doesn't work, copy this link into your browser:</p>
  <p>{link}</p>
  <p style="color: #999;">This link will expire in {expire_hours} hours. If you didn't
  create a StreamFlow account, you can safely ignore this email.</p>
</div>
""",
    )


def account_deleted_email(username: str) -> EmailTemplate:
    return EmailTemplate(
        subject="Your StreamFlow Account Has Been Deleted",
        html=f"""
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h1>StreamFlow</h1>
  <h2>Goodbye, {username}</h2>
  <p>Your StreamFlow account has been deleted as requested.</p>
  <ul>
    <li>All your personal data has been permanently removed</li>
    <li>Your playlists and liked videos have been deleted</li>
    <li>Your watch history has been cleared</li>
    <li>You can create a new account anytime</li>
  </ul>
</div>
""",
    )


class EmailService:
    """
    Sends templated emails.

    `send` never raises: delivery problems are logged and reported through
    the boolean result so callers can decide whether they matter.
    """

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or settings

    def _build_message(self, to: str, template: EmailTemplate) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = template.subject
        message["From"] = formataddr((self.config.email_from_name, self.config.smtp_user))
        message["To"] = to
        message.set_content("Please view this message in an HTML capable email client.")
        message.add_alternative(template.html, subtype="html")
        return message

    def _deliver(self, message: EmailMessage) -> None:
        with smtplib.SMTP(self.config.smtp_host, self.config.smtp_port, timeout=30) as smtp:
            if self.config.smtp_use_tls:
                smtp.starttls()
            if self.config.smtp_password:
                smtp.login(self.config.smtp_user, self.config.smtp_password)
            smtp.send_message(message)

    async def send(self, to: str, template: EmailTemplate) -> bool:
        if not self.config.email_enabled or self.config.is_development:
            logger.info(f"Email delivery disabled, would send '{template.subject}' to {to}")
            logger.debug(template.html)
            return True

        message = self._build_message(to, template)
        try:
            await asyncio.to_thread(self._deliver, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Email sending failed for {to}: {e}")
            return False

        logger.info(f"Email '{template.subject}' sent to {to}")
        return True

    async def send_verification_email(self, to: str, username: str, token: str) -> bool:
        template = verification_email(
            username,
            verification_link(token, self.config.frontend_url),
            self.config.email_verification_expire_hours,
        )
        return await self.send(to, template)

    async def send_account_deleted_email(self, to: str, username: str) -> bool:
        return await self.send(to, account_deleted_email(username))
