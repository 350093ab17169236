"""Base email channel interface."""

from typing import Optional, Protocol


class EmailChannel(Protocol):
    """Protocol for email delivery services."""

    def is_configured(self) -> bool:
        """Whether the channel can attempt delivery at all."""
        ...

    def send(
        self, to: str, subject: str, text: str, html: Optional[str] = None
    ) -> None:
        """Send an email message.

        Args:
            to: Recipient address
            subject: Subject line (prefix is applied by the channel)
            text: Plain-text body
            html: Optional HTML alternative

        Raises:
            NotificationError: If the message fails to send
        """
        ...


class NotificationError(Exception):
    """Raised when a notification fails to send."""
    pass
