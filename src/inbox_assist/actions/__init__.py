"""LLM actions on host items: orchestration, lifecycle hooks, reply injection."""

from inbox_assist.actions.hooks import ActionEvent, ActionPhase, LifecycleHooks
from inbox_assist.actions.models import ActionKind, ActionRequest, ActionResult, ActionState
from inbox_assist.actions.orchestrator import ActionOrchestrator, parse_schedule
from inbox_assist.actions.reply import ReplyInjector, ReplyOptions, ReplyResult

__all__ = [
    "ActionEvent",
    "ActionPhase",
    "LifecycleHooks",
    "ActionKind",
    "ActionRequest",
    "ActionResult",
    "ActionState",
    "ActionOrchestrator",
    "parse_schedule",
    "ReplyInjector",
    "ReplyOptions",
    "ReplyResult",
]
