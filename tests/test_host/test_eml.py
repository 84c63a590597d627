"""Tests for .eml parsing."""

from email.message import EmailMessage

import pytest

pytest.importorskip("bs4")

from inbox_assist.host.base import Identity, Importance, ItemKind  # noqa: E402
from inbox_assist.host.eml import item_from_eml  # noqa: E402

PLAIN_EML = """\
From: Alice Example <alice@example.com>
To: Bob <bob@example.com>, carol@example.com
Cc: Dan <dan@example.com>
Subject: Quarterly numbers
Date: Mon, 1 Jan 2024 12:00:00 +0000
Message-ID: <m2@example.com>
References: <m0@example.com> <m1@example.com>
X-Priority: 1
Content-Type: text/plain; charset="utf-8"

Hello Bob,
see attached.
"""


@pytest.mark.asyncio
async def test_plain_message():
    item = item_from_eml(PLAIN_EML)

    assert item.kind == ItemKind.EMAIL
    assert item.subject == "Quarterly numbers"
    assert item.sender == Identity("Alice Example", "alice@example.com")
    assert await item.to.resolve() == [
        Identity("Bob", "bob@example.com"),
        Identity("carol@example.com", "carol@example.com"),
    ]
    assert await item.cc.resolve() == [Identity("Dan", "dan@example.com")]
    assert await item.bcc.resolve() == []
    assert item.created.isoformat() == "2024-01-01T12:00:00+00:00"
    assert item.importance == Importance.HIGH
    assert item.conversation_id == "<m0@example.com>"
    assert await item.get_body_text(1000) == "Hello Bob,\nsee attached."


def test_importance_header_wins_over_priority():
    raw = PLAIN_EML.replace("X-Priority: 1\n", "Importance: Low\nX-Priority: 1\n")
    assert item_from_eml(raw).importance == Importance.LOW


def test_conversation_id_falls_back_to_message_id():
    raw = PLAIN_EML.replace("References: <m0@example.com> <m1@example.com>\n", "")
    assert item_from_eml(raw).conversation_id == "<m2@example.com>"


def test_conversation_id_prefers_in_reply_to_over_message_id():
    raw = PLAIN_EML.replace(
        "References: <m0@example.com> <m1@example.com>\n", "In-Reply-To: <m1@example.com>\n"
    )
    assert item_from_eml(raw).conversation_id == "<m1@example.com>"


def test_bad_date_is_none():
    raw = PLAIN_EML.replace("Mon, 1 Jan 2024 12:00:00 +0000", "sometime soon")
    assert item_from_eml(raw).created is None


@pytest.mark.asyncio
async def test_html_body_is_flattened():
    raw = (
        "From: a@example.com\n"
        "Subject: Hi\n"
        "Content-Type: text/html; charset=\"utf-8\"\n"
        "\n"
        "<html><head><style>p {color: red}</style></head>"
        "<body><p>Hi <b>there</b></p><script>track()</script></body></html>\n"
    )
    item = item_from_eml(raw)
    assert await item.get_body_text(1000) == "Hi there"


@pytest.mark.asyncio
async def test_attachments():
    msg = EmailMessage()
    msg["From"] = "Alice <alice@example.com>"
    msg["To"] = "bob@example.com"
    msg["Subject"] = "Report"
    msg.set_content("Body text")
    msg.add_attachment(b"PDFDATA", maintype="application", subtype="pdf", filename="report.pdf")

    item = item_from_eml(msg.as_bytes())

    assert len(item.attachments) == 1
    attachment = item.attachments[0]
    assert attachment.name == "report.pdf"
    assert attachment.content_type == "application/pdf"
    assert attachment.size == 7
    assert attachment.is_inline is False
    assert attachment.id == "0"
    assert await item.get_body_text(1000) == "Body text"
