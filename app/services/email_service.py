# File: app/services/email_service.py

"""
Outbound email.

`EmailSender.send` returns True/False rather than raising; callers decide
what a failed delivery means for their request.
"""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from app.core.config import Settings

logger = logging.getLogger(__name__)


class EmailSender:
    def __init__(
        self,
        *,
        host: Optional[str],
        port: int,
        sender: Optional[str],
        user: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        timeout: float = 30.0,
    ):
        self.host = host
        self.port = port
        self.sender = sender or user
        self.user = user
        self.password = password
        self.use_tls = use_tls
        self.timeout = timeout

    @classmethod
    def from_settings(cls, settings: Settings) -> "EmailSender":
        return cls(
            host=settings.smtp_host,
            port=settings.smtp_port,
            sender=settings.smtp_from,
            user=settings.smtp_user,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
        )

    @property
    def configured(self) -> bool:
        return bool(self.host and self.sender)

    def send(self, to_email: str, subject: str, body: str) -> bool:
        if not self.configured:
            logger.error("SMTP is not configured; cannot send %r to %s", subject, to_email)
            return False

        msg = EmailMessage()
        msg["From"] = self.sender
        msg["To"] = to_email
        msg["Subject"] = subject
        msg.set_content(body)

        try:
            with smtplib.SMTP(self.host, self.port, timeout=self.timeout) as s:
                if self.use_tls:
                    s.starttls()
                if self.user and self.password:
                    s.login(self.user, self.password)
                s.send_message(msg)
        except (smtplib.SMTPException, OSError):
            logger.exception("Error sending %r email to %s", subject, to_email)
            return False

        logger.info("Sent %r email to %s", subject, to_email)
        return True


def send_otp_email(sender: EmailSender, email: str, otp: str, *, valid_minutes: int) -> bool:
    return sender.send(
        email,
        "Your OTP for Registration",
        f"Your OTP is {otp}. It is valid for {valid_minutes} minutes.",
    )


def send_password_reset_email(sender: EmailSender, email: str, reset_url: str) -> bool:
    return sender.send(
        email,
        "Password Reset Request",
        f"Reset your password using the link below:\n\n{reset_url}",
    )
