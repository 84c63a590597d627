"""Normalized snapshots of host items, used to build prompts."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

from inbox_assist.host.base import HostAttachment, Identity, Importance, ItemKind


@dataclass(frozen=True)
class ThreadMessage:
    """A prior message of the conversation."""

    sender: Identity = field(default_factory=Identity)
    received: datetime | None = None
    subject: str = ""
    body: str = ""


@dataclass(frozen=True)
class EmailContext:
    subject: str = ""
    sender: Identity = field(default_factory=Identity)
    recipients: tuple[Identity, ...] = ()
    cc: tuple[Identity, ...] = ()
    bcc: tuple[Identity, ...] = ()
    received: datetime | None = None
    importance: Importance = Importance.NORMAL
    attachments: tuple[HostAttachment, ...] = ()
    body: str = ""
    thread: tuple[ThreadMessage, ...] = ()
    conversation_id: str = ""
    kind: ItemKind = field(default=ItemKind.EMAIL, init=False)

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)


@dataclass(frozen=True)
class AppointmentContext:
    subject: str = ""
    organizer: Identity = field(default_factory=Identity)
    location: str = ""
    start: datetime | None = None
    end: datetime | None = None
    required_attendees: tuple[Identity, ...] = ()
    optional_attendees: tuple[Identity, ...] = ()
    attachments: tuple[HostAttachment, ...] = ()
    body: str = ""
    kind: ItemKind = field(default=ItemKind.APPOINTMENT, init=False)

    @property
    def has_attachments(self) -> bool:
        return bool(self.attachments)


ExtractedContext = Union[EmailContext, AppointmentContext]
