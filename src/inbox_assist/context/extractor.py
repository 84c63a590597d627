"""Read host items into normalized contexts.

Field-level failures never abort an extraction: an unreadable body becomes a
placeholder, an unresolvable recipient list becomes empty, and a missing
thread is logged and left out. Only an unsupported item kind raises.
"""

from __future__ import annotations

import logging

from inbox_assist.config import ContextConfig
from inbox_assist.context.formatter import format_context
from inbox_assist.context.models import AppointmentContext, EmailContext, ExtractedContext, ThreadMessage
from inbox_assist.context.threads import ThreadSource, UnavailableThreadSource
from inbox_assist.exceptions import ContextError, UnsupportedItemKindError
from inbox_assist.host.base import HostItem, Identity, Importance, ItemKind, RecipientSource

logger = logging.getLogger(__name__)

EMAIL_BODY_PLACEHOLDER = "Fehler beim Laden des E-Mail-Textes"
APPOINTMENT_BODY_PLACEHOLDER = "Fehler beim Laden des Termin-Textes"


class ContextExtractor:
    """Turn a :class:`HostItem` into an :class:`ExtractedContext`.

    Args:
        config: Extraction toggles; defaults to :class:`ContextConfig()`.
        thread_source: Where conversation history comes from. Defaults to
            :class:`UnavailableThreadSource`.
    """

    def __init__(
        self,
        config: ContextConfig | None = None,
        thread_source: ThreadSource | None = None,
    ):
        self.config = config or ContextConfig()
        self.thread_source = thread_source or UnavailableThreadSource()

    async def extract_context(
        self, item: HostItem | None, include_thread: bool | None = None
    ) -> ExtractedContext:
        """Extract an email or appointment context.

        Args:
            item: The host item.
            include_thread: Overrides ``config.include_thread`` for this call only.

        Raises:
            ContextError: ``item`` is None.
            UnsupportedItemKindError: ``item.kind`` is not email or appointment.
        """
        if item is None:
            raise ContextError("No host item given")
        if item.kind == ItemKind.EMAIL:
            if include_thread is None:
                include_thread = self.config.include_thread
            return await self._extract_email(item, include_thread)
        if item.kind == ItemKind.APPOINTMENT:
            return await self._extract_appointment(item)
        raise UnsupportedItemKindError(item.kind)

    def format_context_for_llm(self, context: ExtractedContext | None) -> str:
        return format_context(context, self.config.max_thread_depth)

    async def _extract_email(self, item: HostItem, include_thread: bool) -> EmailContext:
        cfg = self.config
        conversation_id = item.conversation_id or ""

        recipients = await self._resolve(item.to) if cfg.include_recipients else ()
        cc = await self._resolve(item.cc) if cfg.include_cc else ()
        bcc = await self._resolve(item.bcc) if cfg.include_bcc else ()
        body = await self._get_body(item, EMAIL_BODY_PLACEHOLDER)

        thread: tuple[ThreadMessage, ...] = ()
        if include_thread and conversation_id:
            thread = await self._fetch_thread(conversation_id)

        return EmailContext(
            subject=item.subject or "",
            sender=_identity(item.sender),
            recipients=recipients,
            cc=cc,
            bcc=bcc,
            received=item.created,
            importance=_importance(item.importance),
            attachments=self._attachments(item),
            body=body,
            thread=thread,
            conversation_id=conversation_id,
        )

    async def _extract_appointment(self, item: HostItem) -> AppointmentContext:
        return AppointmentContext(
            subject=item.subject or "",
            organizer=_identity(item.organizer),
            location=item.location or "",
            start=item.start,
            end=item.end,
            required_attendees=await self._resolve(item.required_attendees),
            optional_attendees=await self._resolve(item.optional_attendees),
            attachments=self._attachments(item),
            body=await self._get_body(item, APPOINTMENT_BODY_PLACEHOLDER),
        )

    async def _resolve(self, source: RecipientSource | None) -> tuple[Identity, ...]:
        if source is None:
            return ()
        try:
            identities = await source.resolve()
        except Exception as e:
            logger.warning(f"Failed to resolve recipients: {e}")
            return ()
        return tuple(_identity(i) for i in identities or [])

    async def _get_body(self, item: HostItem, placeholder: str) -> str:
        max_length = self.config.max_body_length
        try:
            body = await item.get_body_text(max_length)
        except Exception as e:
            logger.warning(f"Failed to read item body: {e}")
            return placeholder
        return (body or "")[:max_length]

    def _attachments(self, item: HostItem):
        if not self.config.include_attachments or not item.attachments:
            return ()
        return tuple(item.attachments)

    async def _fetch_thread(self, conversation_id: str) -> tuple[ThreadMessage, ...]:
        depth = self.config.max_thread_depth
        try:
            messages = await self.thread_source.fetch(conversation_id, depth)
        except Exception as e:
            logger.warning(f"Thread extraction failed: {e}")
            return ()
        return tuple(messages[:depth])


def _identity(identity: Identity | None) -> Identity:
    if identity is None:
        return Identity()
    return Identity(name=identity.name or "", email=identity.email or "")


def _importance(value: Importance | str | None) -> Importance:
    if isinstance(value, Importance):
        return value
    if not value:
        return Importance.NORMAL
    try:
        return Importance(str(value).lower())
    except ValueError:
        return Importance.NORMAL
