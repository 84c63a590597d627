"""Abstract capability surface of the host mail client.

The host owns messages, appointments and compose windows. The assistant
only reads item fields through :class:`HostItem` and writes text back
through the optional capabilities a :class:`Mailbox` exposes.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class ItemKind(str, Enum):
    EMAIL = "email"
    APPOINTMENT = "appointment"


class Importance(str, Enum):
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"


class CoercionType(str, Enum):
    TEXT = "text"
    HTML = "html"


@dataclass(frozen=True)
class Identity:
    """A display name and address (sender, recipient, organizer, attendee)."""

    name: str = ""
    email: str = ""


@dataclass(frozen=True)
class HostAttachment:
    id: str = ""
    name: str = ""
    content_type: str = ""
    size: int = 0
    is_inline: bool = False


@dataclass(frozen=True)
class AppointmentDraft:
    """Fields used to pre-fill a new-appointment form."""

    subject: str
    start: datetime
    end: datetime
    location: str = ""
    body: str = ""
    attendees: tuple[str, ...] = field(default_factory=tuple)


class RecipientSource(ABC):
    """A host recipient list that must be resolved asynchronously."""

    @abstractmethod
    async def resolve(self) -> list[Identity]:
        """Return the concrete identities in this list."""
        ...


class HostItem(ABC):
    """A message or appointment as exposed by the host.

    ``kind`` is whatever the host reports; the extractor accepts only
    :class:`ItemKind` values. Fields a given kind does not have stay ``None``.
    """

    kind: str | ItemKind = ItemKind.EMAIL
    subject: str | None = None
    sender: Identity | None = None
    organizer: Identity | None = None
    to: RecipientSource | None = None
    cc: RecipientSource | None = None
    bcc: RecipientSource | None = None
    required_attendees: RecipientSource | None = None
    optional_attendees: RecipientSource | None = None
    created: datetime | None = None
    start: datetime | None = None
    end: datetime | None = None
    location: str | None = None
    importance: Importance | str | None = None
    attachments: list[HostAttachment] | None = None
    conversation_id: str | None = None

    @abstractmethod
    async def get_body_text(self, max_length: int) -> str:
        """Plain-text rendering of the body, at most ``max_length`` characters."""
        ...


class ReplyForm(ABC):
    @abstractmethod
    async def display(self, text: str) -> None:
        """Open a reply form pre-filled with ``text``."""
        ...


class ComposeBody(ABC):
    @abstractmethod
    async def set_selected_data(self, text: str, coercion: CoercionType = CoercionType.TEXT) -> None:
        """Insert ``text`` at the cursor of the active compose window."""
        ...


class AppointmentForm(ABC):
    @abstractmethod
    async def display(self, draft: AppointmentDraft) -> None:
        """Open a new-appointment form pre-filled from ``draft``."""
        ...


class Mailbox:
    """The host mailbox: the selected item and the compose capabilities.

    Capability accessors return ``None`` when the host does not offer them
    in its current mode (e.g. no reply form while composing).
    """

    item: HostItem | None = None

    def reply_form(self) -> ReplyForm | None:
        return None

    def compose_body(self) -> ComposeBody | None:
        return None

    def appointment_form(self) -> AppointmentForm | None:
        return None
