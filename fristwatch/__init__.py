"""Fristwatch - deadline reminders and overdue escalation for legal case files."""

__version__ = "0.1.0"
