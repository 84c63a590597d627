"""Generate a reply and write it straight into the host's reply surface."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping

from inbox_assist.actions.hooks import ActionEvent, ActionPhase, LifecycleHooks
from inbox_assist.actions.models import ActionKind, ActionState
from inbox_assist.actions.orchestrator import SURFACE_COMPOSE_BODY, SURFACE_REPLY_FORM
from inbox_assist.actions.prompts import (
    DEFAULT_REPLY_TEMPLATE,
    DETAILED_REPLY_TEMPLATE,
    FORMAL_REPLY_TEMPLATE,
    FRIENDLY_REPLY_TEMPLATE,
    SHORT_REPLY_TEMPLATE,
    render_template,
)
from inbox_assist.context.extractor import ContextExtractor
from inbox_assist.context.models import ExtractedContext
from inbox_assist.exceptions import NoInjectionSurfaceError
from inbox_assist.host.base import CoercionType, HostItem, Mailbox
from inbox_assist.inference.client import AsyncInferenceClient
from inbox_assist.inference.models import GenerationParameters

logger = logging.getLogger(__name__)

GENERATING_PLACEHOLDER = "Antwort wird generiert..."


@dataclass(frozen=True)
class ReplyOptions:
    prompt_template: str | None = None
    parameters: dict[str, Any] = field(default_factory=dict)
    custom_instructions: str | None = None
    response_style: str | None = None


@dataclass(frozen=True)
class ReplyResult:
    text: str
    context: ExtractedContext
    surface: str  # "reply_form" | "compose_body"


REPLY_STYLES: dict[str, ReplyOptions] = {
    "formal": ReplyOptions(FORMAL_REPLY_TEMPLATE, {"temperature": 0.5}),
    "friendly": ReplyOptions(FRIENDLY_REPLY_TEMPLATE, {"temperature": 0.7}),
    "short": ReplyOptions(SHORT_REPLY_TEMPLATE, {"temperature": 0.6, "max_tokens": 512}),
    "detailed": ReplyOptions(DETAILED_REPLY_TEMPLATE, {"temperature": 0.8, "max_tokens": 2048}),
}

# Style ids used by the German task pane
STYLE_ALIASES = {
    "formell": "formal",
    "freundlich": "friendly",
    "kurz": "short",
    "detailliert": "detailed",
}


class ReplyInjector:
    """Reply generation that always reads the thread and writes into the host.

    Args:
        client: Inference client.
        extractor: Context extractor; thread inclusion is forced per call
            without touching its shared config.
        mailbox: Host mailbox providing the reply form / compose body.
        prompt_templates: Configured templates; only ``reply`` is used.
        default_parameters: Generation defaults.
        include_thread: Whether reply extraction reads the thread.
        hooks: Lifecycle listeners, shared with the orchestrator in an app.
        settle_delay: Seconds to wait after opening the reply form before
            generating.
    """

    def __init__(
        self,
        client: AsyncInferenceClient,
        extractor: ContextExtractor,
        mailbox: Mailbox,
        prompt_templates: Mapping[str, str] | None = None,
        default_parameters: GenerationParameters | None = None,
        include_thread: bool = True,
        hooks: LifecycleHooks | None = None,
        settle_delay: float = 0.5,
    ):
        self.client = client
        self.extractor = extractor
        self.mailbox = mailbox
        self.prompt_templates = dict(prompt_templates or {})
        self.default_parameters = default_parameters or GenerationParameters()
        self.include_thread = include_thread
        self.hooks = hooks if hooks is not None else LifecycleHooks()
        self.settle_delay = settle_delay

    async def reply_to_email(self, item: HostItem, options: ReplyOptions | None = None) -> ReplyResult:
        """Generate a reply to ``item`` and place it in the reply surface."""
        options = options or ReplyOptions()
        kind = ActionKind.REPLY.value
        state = ActionState.IDLE
        self.hooks.emit(ActionEvent(ActionPhase.BEFORE, kind, item, state))
        try:
            context = await self.extractor.extract_context(item, include_thread=self.include_thread)
            state = ActionState.CONTEXT_EXTRACTED

            prompt = self.create_reply_prompt(context, options)
            state = ActionState.PROMPT_BUILT

            parameters = self.default_parameters.merged(options.parameters)
            response = await self.client.generate_text(prompt, parameters)
            state = ActionState.RESPONSE_RECEIVED

            surface = await self.insert_reply(response.text)
            state = ActionState.RESULT_PROCESSED
        except Exception as e:
            logger.error(f"Reply generation failed after {state.value}: {e}")
            self.hooks.emit(ActionEvent(
                ActionPhase.ERROR, kind, item, ActionState.FAILED, error=e, failed_at=state
            ))
            raise

        result = ReplyResult(text=response.text, context=context, surface=surface)
        self.hooks.emit(ActionEvent(ActionPhase.AFTER, kind, item, ActionState.DONE, result=result))
        return result

    def create_reply_prompt(self, context: ExtractedContext, options: ReplyOptions) -> str:
        """Caller template first, then the configured ``reply`` template, then the default."""
        template = (
            options.prompt_template
            or self.prompt_templates.get(ActionKind.REPLY.value)
            or DEFAULT_REPLY_TEMPLATE
        )
        return render_template(template, {
            "email_context": self.extractor.format_context_for_llm(context),
            "custom_instructions": options.custom_instructions,
            "response_style": options.response_style,
        })

    async def insert_reply(self, text: str) -> str:
        """Reply form first (read mode), else the compose body (compose mode)."""
        reply_form = self.mailbox.reply_form()
        if reply_form is not None:
            await reply_form.display(text)
            return SURFACE_REPLY_FORM
        compose = self.mailbox.compose_body()
        if compose is not None:
            await compose.set_selected_data(text, CoercionType.TEXT)
            return SURFACE_COMPOSE_BODY
        raise NoInjectionSurfaceError("Neither a reply form nor a compose body is available")

    @staticmethod
    def set_reply_style(style: str) -> ReplyOptions:
        """Preset options for a named style; unknown names give empty options."""
        name = STYLE_ALIASES.get(style, style)
        preset = REPLY_STYLES.get(name)
        if preset is None:
            return ReplyOptions()
        return replace(preset, parameters=dict(preset.parameters))

    async def open_reply_form_and_generate(
        self, item: HostItem, options: ReplyOptions | None = None
    ) -> ReplyResult:
        """Open the reply form with a placeholder, let the UI settle, then reply.

        Without a reply form the host is already composing, so the reply is
        generated straight away.
        """
        reply_form = self.mailbox.reply_form()
        if reply_form is not None:
            await reply_form.display(GENERATING_PLACEHOLDER)
            await asyncio.sleep(self.settle_delay)
        return await self.reply_to_email(item, options)
