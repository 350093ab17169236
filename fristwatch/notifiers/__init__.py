"""Delivery channels for Fristwatch notifications."""

from .base import EmailChannel, NotificationError
from .email import SmtpEmailChannel

__all__ = ["EmailChannel", "NotificationError", "SmtpEmailChannel"]
