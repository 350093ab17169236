"""Email channel implementation using SMTP."""

import logging
import smtplib
from email.message import EmailMessage
from typing import Optional

from .base import NotificationError

logger = logging.getLogger(__name__)


class SmtpEmailChannel:
    """Sends deadline notifications via SMTP email."""

    def __init__(
        self,
        host: Optional[str],
        port: int,
        from_address: Optional[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        use_tls: bool = True,
        subject_prefix: str = "Fristwatch",
    ):
        self.host = host
        self.port = port
        self.username = username
        self.password = password
        self.from_address = from_address
        self.use_tls = use_tls
        self.subject_prefix = subject_prefix or "Fristwatch"

    @classmethod
    def from_settings(cls, settings) -> "SmtpEmailChannel":
        return cls(
            host=settings.smtp_host,
            port=int(settings.smtp_port),
            from_address=settings.email_from_address,
            username=settings.smtp_username,
            password=settings.smtp_password,
            use_tls=settings.smtp_use_tls,
            subject_prefix=settings.email_subject_prefix,
        )

    def is_configured(self) -> bool:
        return bool(self.host and self.from_address)

    def send(
        self, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> None:
        """Send a plain-text email (with optional HTML alternative).

        Args:
            to: Recipient address.
            subject: Subject line (prefix is applied automatically).
            text: Message body to send (plain text).
            html: Optional HTML body for multipart/alternative delivery.

        Raises:
            NotificationError: If sending fails.
        """
        if not self.is_configured():
            raise NotificationError("Email notification failed: SMTP not configured")
        if not to:
            raise NotificationError("Email notification failed: no recipient")

        message = EmailMessage()
        message["Subject"] = f"{self.subject_prefix} | {subject}"
        message["From"] = self.from_address
        message["To"] = to
        message.set_content(text or "")

        if html:
            message.add_alternative(html, subtype="html")

        try:
            with smtplib.SMTP(self.host, self.port, timeout=30) as server:
                if self.use_tls:
                    server.starttls()

                if self.username and self.password:
                    server.login(self.username, self.password)

                server.send_message(message)

        except Exception as exc:
            raise NotificationError(f"Email notification failed: {exc}") from exc

        logger.debug(f"Sent email to {to}: {subject}")
