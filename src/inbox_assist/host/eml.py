"""Build host items from RFC 822 (``.eml``) messages."""

from __future__ import annotations

import email
import re
from email import policy
from email.message import EmailMessage
from email.utils import getaddresses, parseaddr

import dateutil.parser as parser
from bs4 import BeautifulSoup

from inbox_assist.host.base import HostAttachment, Identity, Importance, ItemKind
from inbox_assist.host.memory import MemoryItem

_PRIORITY_TO_IMPORTANCE = {
    "1": Importance.HIGH,
    "2": Importance.HIGH,
    "3": Importance.NORMAL,
    "4": Importance.LOW,
    "5": Importance.LOW,
}


def item_from_eml(raw: bytes | str) -> MemoryItem:
    """Parse a raw message into an in-memory email item.

    Pure parsing, no host calls. HTML-only bodies are flattened to text.
    """
    if isinstance(raw, str):
        msg = email.message_from_string(raw, policy=policy.default)
    else:
        msg = email.message_from_bytes(raw, policy=policy.default)

    return MemoryItem(
        kind=ItemKind.EMAIL,
        subject=msg.get("Subject", ""),
        sender=_parse_sender(msg.get("From", "")),
        to=_parse_recipients(msg.get_all("To", [])),
        cc=_parse_recipients(msg.get_all("Cc", [])),
        bcc=_parse_recipients(msg.get_all("Bcc", [])),
        created=_parse_date(msg.get("Date", "")),
        importance=_parse_importance(msg),
        attachments=_extract_attachments(msg),
        conversation_id=_conversation_id(msg),
        body=_extract_body(msg),
    )


def _parse_sender(from_header: str) -> Identity | None:
    if not from_header:
        return None
    name, address = parseaddr(str(from_header))
    return Identity(name=name or address, email=address)


def _parse_recipients(headers: list) -> list[Identity]:
    return [
        Identity(name=name or address, email=address)
        for name, address in getaddresses([str(h) for h in headers])
        if address
    ]


def _parse_date(date_header: str):
    if not date_header:
        return None
    try:
        return parser.parse(str(date_header))
    except (ValueError, OverflowError):
        return None


def _parse_importance(msg: EmailMessage) -> Importance:
    importance = str(msg.get("Importance", "")).strip().lower()
    if importance in ("low", "normal", "high"):
        return Importance(importance)
    priority = str(msg.get("X-Priority", "")).strip()[:1]
    return _PRIORITY_TO_IMPORTANCE.get(priority, Importance.NORMAL)


def _conversation_id(msg: EmailMessage) -> str:
    """First References entry, else the In-Reply-To parent, else this message's own Message-ID."""
    references = str(msg.get("References", "")).split()
    if references:
        return references[0]
    return str(msg.get("In-Reply-To", "") or msg.get("Message-ID", "")).strip()


def _extract_attachments(msg: EmailMessage) -> list[HostAttachment]:
    attachments = []
    for index, part in enumerate(msg.iter_attachments()):
        payload = part.get_payload(decode=True) or b""
        content_id = str(part.get("Content-ID", "")).strip("<> ")
        attachments.append(HostAttachment(
            id=content_id or str(index),
            name=part.get_filename() or "",
            content_type=part.get_content_type(),
            size=len(payload),
            is_inline=part.get_content_disposition() == "inline",
        ))
    return attachments


def _extract_body(msg: EmailMessage) -> str:
    part = msg.get_body(preferencelist=("plain", "html"))
    if part is None:
        return ""
    content = part.get_content()
    if part.get_content_type() == "text/html":
        return _strip_html(content)
    return content.strip()


def _strip_html(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    text = soup.get_text(separator=" ")
    text = re.sub(r"\s+", " ", text).strip()
    return text
