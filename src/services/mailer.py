"""
Outgoing mail.

SmtpMailSender delivers plain-text messages over SMTP with STARTTLS.
"""

import logging
import smtplib
from abc import ABC, abstractmethod
from email.mime.text import MIMEText
from typing import Optional

from src.common.config import Config

logger = logging.getLogger(__name__)


class MailSender(ABC):
    """Mail-delivery service interface."""

    @abstractmethod
    def send_email(self, to: str, subject: str, body: str) -> None:
        """Send a plain-text message. Raises on delivery failure."""
        pass


class SmtpMailSender(MailSender):
    def __init__(
        self,
        host: Optional[str] = None,
        port: Optional[int] = None,
        user: Optional[str] = None,
        password: Optional[str] = None,
        from_email: Optional[str] = None,
    ):
        self.host = host if host is not None else Config.SMTP_HOST
        self.port = port if port is not None else Config.SMTP_PORT
        self.user = user if user is not None else Config.SMTP_USER
        self.password = password if password is not None else Config.SMTP_PASS
        self.from_email = from_email if from_email is not None else Config.FROM_EMAIL

    def is_configured(self) -> bool:
        return bool(self.host and self.from_email)

    def send_email(self, to: str, subject: str, body: str) -> None:
        if not self.is_configured():
            raise RuntimeError("Email not configured: missing SMTP_HOST or FROM_EMAIL")

        msg = MIMEText(body, "plain", "utf-8")
        msg["Subject"] = subject
        msg["From"] = self.from_email
        msg["To"] = to

        with smtplib.SMTP(self.host, self.port) as server:
            server.starttls()
            if self.user:
                server.login(self.user, self.password)
            server.send_message(msg)
        logger.info(f"Email sent to {to}: {subject}")
