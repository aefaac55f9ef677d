"""
Outgoing email for the auth flows.

Only the password reset link is sent today. Senders take
``(recipient, subject, message)`` and either return normally or raise
``EmailDeliveryError``.
"""

import logging
import smtplib
from email.mime.text import MIMEText
from typing import Protocol

from shopapi.core.config import Settings
from shopapi.errors import EmailDeliveryError

logger = logging.getLogger(__name__)

APP_NAME = "Shop"


class EmailSender(Protocol):
    def send(self, recipient: str, subject: str, message: str) -> None:
        ...


class SmtpEmailSender:
    """Plain-text email over SMTP, configured from ``Settings``."""

    def __init__(self, settings: Settings):
        self.settings = settings

    def is_configured(self) -> bool:
        return bool(self.settings.smtp_user and self.settings.smtp_password)

    def send(self, recipient: str, subject: str, message: str) -> None:
        if not self.is_configured():
            raise EmailDeliveryError("Email is not configured")

        msg = MIMEText(message, "plain")
        msg["Subject"] = subject
        msg["From"] = f"{APP_NAME} <{self.settings.smtp_from}>"
        msg["To"] = recipient

        try:
            with smtplib.SMTP(self.settings.smtp_host, self.settings.smtp_port) as server:
                if self.settings.smtp_use_tls:
                    server.starttls()
                server.login(self.settings.smtp_user, self.settings.smtp_password)
                server.sendmail(self.settings.smtp_from, recipient, msg.as_string())
        except Exception as exc:
            raise EmailDeliveryError(f"Failed to send email to {recipient}") from exc

        logger.info("Email sent to %s: %s", recipient, subject)


def build_reset_message(reset_url: str) -> str:
    return (
        "You are receiving this email because you (or someone else) has requested "
        f"the reset of a password. Please make a PUT request to: \n\n {reset_url}"
    )
