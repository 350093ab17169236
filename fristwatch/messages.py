"""Notification texts for advance reminders and overdue escalations."""

import html
import re
from datetime import date
from typing import Tuple

from .models import DeadlineEntry, NotificationRecord, ResponsibleUser

CATCH_UP_MARKER = "[Catch-up]"


def format_date(value: date) -> str:
    return value.strftime("%d.%m.%Y")


def days_text(days: int) -> str:
    return "1 day" if days == 1 else f"{days} days"


def _catch_up_prefix(title: str, catch_up: bool) -> str:
    return f"{CATCH_UP_MARKER} {title}" if catch_up else title


# =============================================================================
# Advance reminders
# =============================================================================


def advance_reminder(
    deadline: DeadlineEntry, days_until: int, catch_up: bool = False
) -> Tuple[str, str]:
    due = format_date(deadline.effective_due_date)
    title = _catch_up_prefix(f"Advance reminder: {deadline.title}", catch_up)
    message = f"Deadline expires on {due} ({days_text(days_until)} left)."
    return title, message


def advance_reminder_for_substitute(
    deadline: DeadlineEntry,
    original: ResponsibleUser,
    days_until: int,
    catch_up: bool = False,
) -> Tuple[str, str]:
    due = format_date(deadline.effective_due_date)
    title = _catch_up_prefix(
        f"[Substituting for {original.name}] Advance reminder: {deadline.title}",
        catch_up,
    )
    message = (
        f"Deadline expires on {due} ({days_text(days_until)} left). "
        f"You are substituting for {original.name}."
    )
    return title, message


def advance_reminder_delegated(
    deadline: DeadlineEntry,
    substitute: ResponsibleUser,
    days_until: int,
    catch_up: bool = False,
) -> Tuple[str, str]:
    due = format_date(deadline.effective_due_date)
    title = _catch_up_prefix(
        f"Advance reminder: {deadline.title} (delegated to substitute)", catch_up
    )
    message = (
        f"Deadline expires on {due} ({days_text(days_until)} left). "
        f"Delegated to {substitute.name}."
    )
    return title, message


# =============================================================================
# Overdue escalation
# =============================================================================


def overdue_for_responsible(deadline: DeadlineEntry) -> Tuple[str, str]:
    due = format_date(deadline.effective_due_date)
    return (
        f"OVERDUE: {deadline.title}",
        f"Deadline was due on {due} and is not resolved!",
    )


def overdue_for_substitute(
    deadline: DeadlineEntry, original: ResponsibleUser
) -> Tuple[str, str]:
    due = format_date(deadline.effective_due_date)
    return (
        f"[Substituting for {original.name}] OVERDUE: {deadline.title}",
        f"Deadline was due on {due}. {original.name} is away.",
    )


def overdue_for_admin(
    deadline: DeadlineEntry, responsible: ResponsibleUser
) -> Tuple[str, str]:
    due = format_date(deadline.effective_due_date)
    return (
        f"ESCALATION: {deadline.title}",
        f"Overdue deadline ({due}), responsible: {responsible.name}.",
    )


# =============================================================================
# Email rendering
# =============================================================================


def email_text(record: NotificationRecord, recipient: ResponsibleUser) -> str:
    lines = [f"Hello {recipient.name},", "", record.message]
    case_id = record.payload.get("case_id")
    if case_id:
        lines.extend(["", f"Case file: {case_id}"])
    if record.is_catch_up:
        lines.extend(
            ["", "This reminder was delayed and is delivered as a catch-up."]
        )
    lines.extend(["", "- Fristwatch"])
    return "\n".join(lines)


def plain_text_to_html(text: str) -> str:
    """Convert a plain-text body to lightweight HTML with **bold** support."""
    bold_pattern = re.compile(r"\*\*(.+?)\*\*")

    def render_inline(segment: str) -> str:
        escaped = html.escape(segment)
        return bold_pattern.sub(lambda m: f"<strong>{m.group(1)}</strong>", escaped)

    html_lines = []
    for line in (text or "").splitlines():
        stripped = line.strip()
        if stripped == "":
            html_lines.append("<br/>")
        else:
            html_lines.append(f"<p>{render_inline(stripped)}</p>")

    body = "\n".join(html_lines)
    return (
        "<div style=\"font-family: 'Segoe UI', 'Helvetica Neue', Arial, sans-serif;"
        ' font-size: 14px; line-height: 1.5; color: #111;">'
        f"{body}"
        "</div>"
    )
