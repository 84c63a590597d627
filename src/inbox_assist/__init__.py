"""Mail-client assistant: item context in, generated text back into the host."""

from inbox_assist.actions import (
    ActionKind,
    ActionOrchestrator,
    ActionRequest,
    ActionResult,
    LifecycleHooks,
    ReplyInjector,
    ReplyOptions,
)
from inbox_assist.app import AssistantApp
from inbox_assist.config import AssistantConfig
from inbox_assist.context import ContextExtractor, format_context
from inbox_assist.inference import AsyncInferenceClient, GenerationParameters, InferenceClient

__all__ = [
    "ActionKind",
    "ActionOrchestrator",
    "ActionRequest",
    "ActionResult",
    "LifecycleHooks",
    "ReplyInjector",
    "ReplyOptions",
    "AssistantApp",
    "AssistantConfig",
    "ContextExtractor",
    "format_context",
    "AsyncInferenceClient",
    "GenerationParameters",
    "InferenceClient",
]
