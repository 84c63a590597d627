"""Tests for context formatting."""

from datetime import datetime, timezone

import pytest

from inbox_assist.context.formatter import THREAD_HEADER, format_context, format_date
from inbox_assist.context.models import AppointmentContext, EmailContext, ThreadMessage
from inbox_assist.host.base import HostAttachment, Identity, Importance


def _email(**kwargs):
    defaults = dict(
        subject="Q1 Review",
        sender=Identity("A", "a@x.com"),
        recipients=(Identity("B", "b@x.com"),),
        body="Let's meet.",
    )
    defaults.update(kwargs)
    return EmailContext(**defaults)


def test_email_header_block():
    text = format_context(_email())
    assert text == (
        "Betreff: Q1 Review\n"
        "Von: A <a@x.com>\n"
        "An: B <b@x.com>\n"
        "Datum: \n"
        "Wichtigkeit: normal\n"
        "\n"
        "Let's meet."
    )


def test_email_full_fields():
    text = format_context(_email(
        cc=(Identity("C", "c@x.com"), Identity("D", "d@x.com")),
        received=datetime(2024, 3, 5, 9, 7, 2, tzinfo=timezone.utc),
        importance=Importance.HIGH,
        attachments=(HostAttachment(id="1", name="report.pdf"), HostAttachment(id="2", name="q1.xlsx")),
    ))
    assert "CC: C <c@x.com>, D <d@x.com>\n" in text
    assert "Datum: 05.03.2024, 09:07:02\n" in text
    assert "Wichtigkeit: hoch\n" in text
    assert "Anhänge: report.pdf, q1.xlsx\n" in text


def test_empty_and_absent_lists_render_alike():
    assert format_context(_email(cc=())) == format_context(_email())
    assert "CC:" not in format_context(_email())
    assert "An:" not in format_context(_email(recipients=()))


def test_identical_contexts_render_identically():
    received = datetime(2024, 1, 1, 10, 0)
    assert format_context(_email(received=received)) == format_context(_email(received=received))


def test_thread_block_respects_depth():
    thread = tuple(
        ThreadMessage(sender=Identity(f"P{i}", f"p{i}@x.com"), subject=f"Re {i}", body=f"msg {i}")
        for i in range(4)
    )
    text = format_context(_email(thread=thread), max_thread_depth=2)

    head, _, rest = text.partition(f"\n\n{THREAD_HEADER}\n\n")
    assert head.endswith("Let's meet.")
    assert rest.startswith("Von: P0 <p0@x.com>\nDatum: \nBetreff: Re 0\n\nmsg 0\n\n---\n\n")
    assert "msg 1" in rest
    assert "msg 2" not in rest


def test_no_thread_header_without_messages():
    assert THREAD_HEADER not in format_context(_email())


def test_appointment():
    context = AppointmentContext(
        subject="Planung",
        organizer=Identity("O", "o@x.com"),
        location="Raum 3",
        start=datetime(2024, 6, 1, 14, 0),
        end=datetime(2024, 6, 1, 15, 30),
        required_attendees=(Identity("R", "r@x.com"),),
        body="Agenda folgt.",
    )
    assert format_context(context) == (
        "Betreff: Planung\n"
        "Organisator: O <o@x.com>\n"
        "Ort: Raum 3\n"
        "Start: 01.06.2024, 14:00:00\n"
        "Ende: 01.06.2024, 15:30:00\n"
        "Pflicht-Teilnehmer: R <r@x.com>\n"
        "\n"
        "Agenda folgt."
    )


def test_none_renders_empty():
    assert format_context(None) == ""


def test_unknown_type_raises():
    with pytest.raises(TypeError):
        format_context("not a context")


def test_format_date_none():
    assert format_date(None) == ""
