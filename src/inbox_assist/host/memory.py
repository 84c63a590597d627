"""In-process host implementation backed by plain Python values."""

from __future__ import annotations

from datetime import datetime
from typing import Iterable

from inbox_assist.exceptions import ExtractionError
from inbox_assist.host.base import (
    AppointmentDraft,
    AppointmentForm,
    CoercionType,
    ComposeBody,
    HostAttachment,
    HostItem,
    Identity,
    Importance,
    ItemKind,
    Mailbox,
    RecipientSource,
    ReplyForm,
)


class MemoryRecipients(RecipientSource):
    """A recipient list that resolves to fixed identities, or fails with ``error``."""

    def __init__(self, identities: Iterable[Identity] = (), error: Exception | None = None):
        self.identities = list(identities)
        self.error = error

    async def resolve(self) -> list[Identity]:
        if self.error is not None:
            raise self.error
        return list(self.identities)


def _as_source(value: RecipientSource | Iterable[Identity] | None) -> RecipientSource | None:
    if value is None or isinstance(value, RecipientSource):
        return value
    return MemoryRecipients(value)


class MemoryItem(HostItem):
    """A message or appointment held in memory.

    Recipient arguments accept either a :class:`RecipientSource` or a plain
    iterable of :class:`Identity`. Set ``body_error`` to simulate a host that
    fails to render the body.
    """

    def __init__(
        self,
        kind: str | ItemKind = ItemKind.EMAIL,
        subject: str | None = None,
        sender: Identity | None = None,
        organizer: Identity | None = None,
        to: RecipientSource | Iterable[Identity] | None = None,
        cc: RecipientSource | Iterable[Identity] | None = None,
        bcc: RecipientSource | Iterable[Identity] | None = None,
        required_attendees: RecipientSource | Iterable[Identity] | None = None,
        optional_attendees: RecipientSource | Iterable[Identity] | None = None,
        created: datetime | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        location: str | None = None,
        importance: Importance | str | None = None,
        attachments: list[HostAttachment] | None = None,
        conversation_id: str | None = None,
        body: str = "",
        body_error: Exception | None = None,
    ):
        self.kind = kind
        self.subject = subject
        self.sender = sender
        self.organizer = organizer
        self.to = _as_source(to)
        self.cc = _as_source(cc)
        self.bcc = _as_source(bcc)
        self.required_attendees = _as_source(required_attendees)
        self.optional_attendees = _as_source(optional_attendees)
        self.created = created
        self.start = start
        self.end = end
        self.location = location
        self.importance = importance
        self.attachments = attachments
        self.conversation_id = conversation_id
        self.body = body
        self.body_error = body_error

    async def get_body_text(self, max_length: int) -> str:
        if self.body_error is not None:
            raise ExtractionError(f"Failed to read body: {self.body_error}") from self.body_error
        return self.body[:max_length]


class _RecordingReplyForm(ReplyForm):
    def __init__(self, mailbox: MemoryMailbox):
        self._mailbox = mailbox

    async def display(self, text: str) -> None:
        self._mailbox.reply_forms.append(text)


class _RecordingComposeBody(ComposeBody):
    def __init__(self, mailbox: MemoryMailbox):
        self._mailbox = mailbox

    async def set_selected_data(self, text: str, coercion: CoercionType = CoercionType.TEXT) -> None:
        self._mailbox.inserted.append((text, coercion))


class _RecordingAppointmentForm(AppointmentForm):
    def __init__(self, mailbox: MemoryMailbox):
        self._mailbox = mailbox

    async def display(self, draft: AppointmentDraft) -> None:
        self._mailbox.appointments.append(draft)


class MemoryMailbox(Mailbox):
    """A mailbox that records everything written into its surfaces.

    Args:
        item: The currently selected item.
        has_reply_form: Expose a reply-form capability (read mode).
        has_compose_body: Expose a compose-body capability (compose mode).
        has_appointment_form: Expose a new-appointment capability.
    """

    def __init__(
        self,
        item: HostItem | None = None,
        has_reply_form: bool = True,
        has_compose_body: bool = False,
        has_appointment_form: bool = True,
    ):
        self.item = item
        self.has_reply_form = has_reply_form
        self.has_compose_body = has_compose_body
        self.has_appointment_form = has_appointment_form
        self.reply_forms: list[str] = []
        self.inserted: list[tuple[str, CoercionType]] = []
        self.appointments: list[AppointmentDraft] = []

    def reply_form(self) -> ReplyForm | None:
        return _RecordingReplyForm(self) if self.has_reply_form else None

    def compose_body(self) -> ComposeBody | None:
        return _RecordingComposeBody(self) if self.has_compose_body else None

    def appointment_form(self) -> AppointmentForm | None:
        return _RecordingAppointmentForm(self) if self.has_appointment_form else None
