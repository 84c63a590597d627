"""Data models for actions."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from inbox_assist.context.models import ExtractedContext


class ActionKind(str, Enum):
    ANALYZE = "analyze"
    SUMMARIZE = "summarize"
    REPLY = "reply"
    TRANSLATE = "translate"
    CALENDAR = "calendar"  # schedule extraction
    CUSTOM = "custom"


class ActionState(str, Enum):
    """Progress of one action invocation, in order."""

    IDLE = "idle"
    CONTEXT_EXTRACTED = "context_extracted"
    PROMPT_BUILT = "prompt_built"
    RESPONSE_RECEIVED = "response_received"
    RESULT_PROCESSED = "result_processed"
    DONE = "done"
    FAILED = "failed"


def action_kind_value(kind: ActionKind | str) -> str:
    """Plain string key for template lookup and results."""
    return kind.value if isinstance(kind, Enum) else str(kind)


@dataclass(frozen=True)
class ActionRequest:
    """One invocation of an action.

    ``parameters`` are generation overrides (``max_tokens``, ``temperature``,
    ...) merged over the configured defaults.
    """

    action_kind: ActionKind | str
    prompt_template: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    target_language: str | None = None
    custom_prompt: str | None = None


@dataclass(frozen=True)
class ActionResult:
    """Outcome of an action.

    ``event_data`` is set only for schedule extraction; when parsing fails
    it stays ``None`` and ``error`` carries the marker instead.
    """

    action_kind: str
    text: str
    context: ExtractedContext
    event_data: dict[str, Any] | None = None
    error: str | None = None
    source_language: str | None = None
    target_language: str | None = None
