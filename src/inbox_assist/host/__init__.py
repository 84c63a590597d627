"""Host mail-client capability surface.

The ``.eml`` adapter needs beautifulsoup4 and is loaded lazily:
    from inbox_assist.host.eml import item_from_eml
"""

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
from inbox_assist.host.memory import MemoryItem, MemoryMailbox, MemoryRecipients


def __getattr__(name):
    """Lazy import for the adapter that requires optional dependencies."""
    if name == "item_from_eml":
        try:
            from inbox_assist.host.eml import item_from_eml
        except ImportError:
            raise ImportError(
                "beautifulsoup4 is required for item_from_eml. "
                "Install with: pip install inbox-assist[eml]"
            )
        return item_from_eml
    raise AttributeError(f"module 'inbox_assist.host' has no attribute {name!r}")


__all__ = [
    "AppointmentDraft",
    "AppointmentForm",
    "CoercionType",
    "ComposeBody",
    "HostAttachment",
    "HostItem",
    "Identity",
    "Importance",
    "ItemKind",
    "Mailbox",
    "RecipientSource",
    "ReplyForm",
    "MemoryItem",
    "MemoryMailbox",
    "MemoryRecipients",
    "item_from_eml",
]
