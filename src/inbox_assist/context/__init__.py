"""Context extraction from host items and prompt-ready formatting."""

from inbox_assist.context.extractor import ContextExtractor
from inbox_assist.context.formatter import format_context
from inbox_assist.context.models import AppointmentContext, EmailContext, ExtractedContext, ThreadMessage
from inbox_assist.context.threads import StaticThreadSource, ThreadSource, UnavailableThreadSource

__all__ = [
    "ContextExtractor",
    "format_context",
    "AppointmentContext",
    "EmailContext",
    "ExtractedContext",
    "ThreadMessage",
    "StaticThreadSource",
    "ThreadSource",
    "UnavailableThreadSource",
]
