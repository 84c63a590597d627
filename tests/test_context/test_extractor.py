"""Tests for ContextExtractor."""

from datetime import datetime

import pytest

from inbox_assist.config import ContextConfig
from inbox_assist.context.extractor import (
    APPOINTMENT_BODY_PLACEHOLDER,
    EMAIL_BODY_PLACEHOLDER,
    ContextExtractor,
)
from inbox_assist.context.models import AppointmentContext, EmailContext, ThreadMessage
from inbox_assist.context.threads import StaticThreadSource, UnavailableThreadSource
from inbox_assist.exceptions import ContextError, ThreadUnavailableError, UnsupportedItemKindError
from inbox_assist.host.base import HostAttachment, Identity, Importance, ItemKind
from inbox_assist.host.memory import MemoryItem, MemoryRecipients

ALICE = Identity("Alice", "alice@example.com")
BOB = Identity("Bob", "bob@example.com")
CAROL = Identity("Carol", "carol@example.com")
DAN = Identity("Dan", "dan@example.com")


@pytest.fixture
def email_item():
    return MemoryItem(
        subject="Quarterly numbers",
        sender=ALICE,
        to=[BOB],
        cc=[CAROL],
        bcc=[DAN],
        created=datetime(2024, 1, 1, 12, 0),
        importance="High",
        attachments=[HostAttachment(id="a1", name="q1.pdf", content_type="application/pdf", size=10)],
        conversation_id="conv-1",
        body="Please review.",
    )


def _extractor(thread_source=None, **config):
    return ContextExtractor(
        ContextConfig(**config),
        thread_source=thread_source or UnavailableThreadSource(delay=0),
    )


@pytest.mark.asyncio
async def test_extract_email(email_item):
    context = await _extractor().extract_context(email_item)

    assert isinstance(context, EmailContext)
    assert context.kind == ItemKind.EMAIL
    assert context.subject == "Quarterly numbers"
    assert context.sender == ALICE
    assert context.recipients == (BOB,)
    assert context.cc == (CAROL,)
    assert context.bcc == ()
    assert context.importance == Importance.HIGH
    assert context.has_attachments
    assert context.body == "Please review."
    assert context.thread == ()
    assert context.conversation_id == "conv-1"


@pytest.mark.asyncio
async def test_toggles(email_item):
    context = await _extractor(
        include_recipients=False, include_cc=False, include_bcc=True, include_attachments=False
    ).extract_context(email_item)

    assert context.recipients == ()
    assert context.cc == ()
    assert context.bcc == (DAN,)
    assert context.attachments == ()


@pytest.mark.asyncio
async def test_body_failure_uses_placeholder():
    item = MemoryItem(subject="x", body_error=RuntimeError("host busy"))
    context = await _extractor().extract_context(item)
    assert context.body == EMAIL_BODY_PLACEHOLDER


@pytest.mark.asyncio
async def test_appointment_body_failure_uses_placeholder():
    item = MemoryItem(kind=ItemKind.APPOINTMENT, body_error=RuntimeError("host busy"))
    context = await _extractor().extract_context(item)
    assert context.body == APPOINTMENT_BODY_PLACEHOLDER


@pytest.mark.asyncio
async def test_body_is_capped_even_if_host_ignores_limit():
    class GreedyItem(MemoryItem):
        async def get_body_text(self, max_length):
            return self.body

    item = GreedyItem(body="x" * 50)
    context = await _extractor(max_body_length=10).extract_context(item)
    assert context.body == "x" * 10


@pytest.mark.asyncio
async def test_recipient_failure_yields_empty_list():
    item = MemoryItem(to=MemoryRecipients(error=RuntimeError("lookup failed")), cc=[CAROL])
    context = await _extractor().extract_context(item)
    assert context.recipients == ()
    assert context.cc == (CAROL,)


@pytest.mark.asyncio
async def test_missing_fields_default_to_empty():
    context = await _extractor().extract_context(MemoryItem())
    assert context.subject == ""
    assert context.sender == Identity()
    assert context.recipients == ()
    assert context.importance == Importance.NORMAL


@pytest.mark.asyncio
async def test_unknown_importance_is_normal():
    context = await _extractor().extract_context(MemoryItem(importance="urgent"))
    assert context.importance == Importance.NORMAL


@pytest.mark.asyncio
async def test_thread_unavailable_is_absorbed(email_item):
    context = await _extractor(include_thread=True).extract_context(email_item)
    assert context.thread == ()


@pytest.mark.asyncio
async def test_unavailable_source_raises():
    with pytest.raises(ThreadUnavailableError):
        await UnavailableThreadSource(delay=0).fetch("conv-1", 3)


@pytest.mark.asyncio
async def test_thread_from_source_bounded_by_depth(email_item):
    messages = [ThreadMessage(sender=BOB, subject=f"Re {i}", body=f"m{i}") for i in range(5)]
    source = StaticThreadSource({"conv-1": messages})
    extractor = _extractor(thread_source=source, max_thread_depth=2)

    without = await extractor.extract_context(email_item)
    forced = await extractor.extract_context(email_item, include_thread=True)

    assert without.thread == ()
    assert [m.body for m in forced.thread] == ["m0", "m1"]
    assert extractor.config.include_thread is False


@pytest.mark.asyncio
async def test_thread_needs_conversation_id():
    source = StaticThreadSource({"": [ThreadMessage(body="orphan")]})
    context = await _extractor(thread_source=source, include_thread=True).extract_context(MemoryItem())
    assert context.thread == ()


@pytest.mark.asyncio
async def test_extract_appointment():
    item = MemoryItem(
        kind="appointment",
        subject="Planung",
        organizer=ALICE,
        location="Raum 3",
        start=datetime(2024, 6, 1, 14, 0),
        end=datetime(2024, 6, 1, 15, 0),
        required_attendees=[BOB],
        optional_attendees=[CAROL],
        body="Agenda",
    )
    context = await _extractor().extract_context(item)

    assert isinstance(context, AppointmentContext)
    assert context.organizer == ALICE
    assert context.location == "Raum 3"
    assert context.required_attendees == (BOB,)
    assert context.optional_attendees == (CAROL,)
    assert context.body == "Agenda"


@pytest.mark.asyncio
async def test_unsupported_kind():
    with pytest.raises(UnsupportedItemKindError, match="task"):
        await _extractor().extract_context(MemoryItem(kind="task"))


@pytest.mark.asyncio
async def test_no_item():
    with pytest.raises(ContextError):
        await _extractor().extract_context(None)


@pytest.mark.asyncio
async def test_format_context_for_llm_uses_configured_depth(email_item):
    messages = [ThreadMessage(body=f"m{i}") for i in range(3)]
    extractor = _extractor(thread_source=StaticThreadSource({"conv-1": messages}), max_thread_depth=1)
    context = await extractor.extract_context(email_item, include_thread=True)
    text = extractor.format_context_for_llm(context)
    assert text.startswith("Betreff: Quarterly numbers\nVon: Alice <alice@example.com>\n")
    assert "m0" in text
    assert "m1" not in text
