"""Render an extracted context as the text block the model sees.

Output is a pure function of the context: no clock, locale or timezone
lookups, so identical contexts always render byte-identical text.
"""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from inbox_assist.context.models import AppointmentContext, EmailContext, ExtractedContext
from inbox_assist.host.base import Identity, Importance

DATE_FORMAT = "%d.%m.%Y, %H:%M:%S"
THREAD_HEADER = "--- Vorherige Nachrichten ---"
THREAD_SEPARATOR = "---"

IMPORTANCE_LABELS = {
    Importance.LOW: "niedrig",
    Importance.NORMAL: "normal",
    Importance.HIGH: "hoch",
}


def format_context(context: ExtractedContext | None, max_thread_depth: int = 3) -> str:
    """Serialize ``context`` for prompting. ``None`` renders as an empty string."""
    if context is None:
        return ""
    if isinstance(context, EmailContext):
        return _format_email(context, max_thread_depth)
    if isinstance(context, AppointmentContext):
        return _format_appointment(context)
    raise TypeError(f"Cannot format context of type {type(context).__name__}")


def format_date(value: datetime | None) -> str:
    return value.strftime(DATE_FORMAT) if value else ""


def _format_identity(identity: Identity) -> str:
    return f"{identity.name} <{identity.email}>"


def _format_identities(identities: Iterable[Identity]) -> str:
    return ", ".join(_format_identity(i) for i in identities)


def _format_email(context: EmailContext, max_thread_depth: int) -> str:
    lines = [
        f"Betreff: {context.subject}",
        f"Von: {_format_identity(context.sender)}",
    ]
    if context.recipients:
        lines.append(f"An: {_format_identities(context.recipients)}")
    if context.cc:
        lines.append(f"CC: {_format_identities(context.cc)}")
    lines.append(f"Datum: {format_date(context.received)}")
    lines.append(f"Wichtigkeit: {IMPORTANCE_LABELS[context.importance]}")
    if context.attachments:
        lines.append("Anhänge: " + ", ".join(a.name for a in context.attachments))

    text = "\n".join(lines) + "\n\n" + context.body

    thread = context.thread[:max_thread_depth]
    if thread:
        text += f"\n\n{THREAD_HEADER}\n\n"
        for message in thread:
            text += (
                f"Von: {_format_identity(message.sender)}\n"
                f"Datum: {format_date(message.received)}\n"
                f"Betreff: {message.subject}\n\n"
                f"{message.body}\n\n{THREAD_SEPARATOR}\n\n"
            )
    return text


def _format_appointment(context: AppointmentContext) -> str:
    lines = [
        f"Betreff: {context.subject}",
        f"Organisator: {_format_identity(context.organizer)}",
        f"Ort: {context.location}",
        f"Start: {format_date(context.start)}",
        f"Ende: {format_date(context.end)}",
    ]
    if context.required_attendees:
        lines.append(f"Pflicht-Teilnehmer: {_format_identities(context.required_attendees)}")
    if context.optional_attendees:
        lines.append(f"Optionale Teilnehmer: {_format_identities(context.optional_attendees)}")
    if context.attachments:
        lines.append("Anhänge: " + ", ".join(a.name for a in context.attachments))
    return "\n".join(lines) + "\n\n" + context.body
