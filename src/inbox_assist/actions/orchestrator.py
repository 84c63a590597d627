"""Run an action: extract context, build a prompt, generate, post-process."""

from __future__ import annotations

import json
import logging
import re
from datetime import datetime, timedelta
from typing import Any, Mapping

import dateutil.parser as parser

from inbox_assist.actions.hooks import ActionEvent, ActionPhase, LifecycleHooks
from inbox_assist.actions.models import (
    ActionKind,
    ActionRequest,
    ActionResult,
    ActionState,
    action_kind_value,
)
from inbox_assist.actions.prompts import DEFAULT_PROMPT_TEMPLATE, render_template
from inbox_assist.context.extractor import ContextExtractor
from inbox_assist.context.models import ExtractedContext
from inbox_assist.exceptions import NoInjectionSurfaceError, ResponseParseError
from inbox_assist.host.base import AppointmentDraft, CoercionType, HostItem, Mailbox
from inbox_assist.inference.client import AsyncInferenceClient
from inbox_assist.inference.models import GeneratedResponse, GenerationParameters

logger = logging.getLogger(__name__)

SOURCE_LANGUAGE = "Deutsch"
CALENDAR_PARSE_ERROR = "Konnte keine gültigen Kalenderdaten extrahieren"
DEFAULT_APPOINTMENT_SUBJECT = "Neuer Termin"

SURFACE_REPLY_FORM = "reply_form"
SURFACE_COMPOSE_BODY = "compose_body"

_FENCED_JSON = re.compile(r"```(?:json|JSON)?\s*(\{[\s\S]*?\})\s*```")
_BRACED_JSON = re.compile(r"\{[\s\S]*\}")


class ActionOrchestrator:
    """Turn (item, action, options) into an :class:`ActionResult`.

    Args:
        client: Inference client used for the single generate call.
        extractor: Context extractor for the host item.
        prompt_templates: Templates keyed by action kind.
        default_parameters: Generation defaults; request parameters win per key.
        mailbox: Host mailbox, needed only for the write-back helpers.
        hooks: Lifecycle listeners; a private list is created when omitted.
    """

    def __init__(
        self,
        client: AsyncInferenceClient,
        extractor: ContextExtractor,
        prompt_templates: Mapping[str, str] | None = None,
        default_parameters: GenerationParameters | None = None,
        mailbox: Mailbox | None = None,
        hooks: LifecycleHooks | None = None,
    ):
        self.client = client
        self.extractor = extractor
        self.prompt_templates = dict(prompt_templates or {})
        self.default_parameters = default_parameters or GenerationParameters()
        self.mailbox = mailbox
        self.hooks = hooks if hooks is not None else LifecycleHooks()

    async def execute_action(self, item: HostItem, request: ActionRequest) -> ActionResult:
        """Run one action end to end.

        Any failure fires the error event and is re-raised; no partial
        result is returned.
        """
        kind = action_kind_value(request.action_kind)
        state = ActionState.IDLE
        self.hooks.emit(ActionEvent(ActionPhase.BEFORE, kind, item, state))
        try:
            context = await self.extractor.extract_context(item)
            state = ActionState.CONTEXT_EXTRACTED

            prompt = self.create_prompt(kind, context, request)
            state = ActionState.PROMPT_BUILT

            parameters = self.default_parameters.merged(request.parameters)
            response = await self.client.generate_text(prompt, parameters)
            state = ActionState.RESPONSE_RECEIVED

            result = self.process_response(kind, response, context, request)
            state = ActionState.RESULT_PROCESSED
        except Exception as e:
            logger.error(f"Action {kind} failed after {state.value}: {e}")
            self.hooks.emit(ActionEvent(
                ActionPhase.ERROR, kind, item, ActionState.FAILED, error=e, failed_at=state
            ))
            raise

        self.hooks.emit(
            ActionEvent(ActionPhase.AFTER, kind, item, ActionState.DONE, result=result)
        )
        return result

    def create_prompt(
        self, action_kind: ActionKind | str, context: ExtractedContext, request: ActionRequest
    ) -> str:
        """Render the prompt for ``action_kind``.

        Template precedence: configured template for the kind, then the
        request's template, then its custom prompt, then a generic default.
        """
        kind = action_kind_value(action_kind)
        template = (
            self.prompt_templates.get(kind)
            or request.prompt_template
            or request.custom_prompt
            or DEFAULT_PROMPT_TEMPLATE
        )
        return render_template(template, {
            "email_context": self.extractor.format_context_for_llm(context),
            "target_language": request.target_language,
            "custom_prompt": request.custom_prompt,
        })

    def process_response(
        self,
        action_kind: ActionKind | str,
        response: GeneratedResponse | dict | str,
        context: ExtractedContext,
        request: ActionRequest | None = None,
    ) -> ActionResult:
        kind = action_kind_value(action_kind)
        if not isinstance(response, GeneratedResponse):
            response = GeneratedResponse.from_payload(response)
        text = response.text

        if kind == ActionKind.CALENDAR.value:
            try:
                event_data = parse_schedule(text)
            except ResponseParseError as e:
                logger.warning(f"Calendar response could not be parsed: {e}")
                return ActionResult(kind, text, context, error=CALENDAR_PARSE_ERROR)
            return ActionResult(kind, text, context, event_data=event_data)

        if kind == ActionKind.TRANSLATE.value:
            return ActionResult(
                kind,
                text,
                context,
                source_language=SOURCE_LANGUAGE,
                target_language=request.target_language if request else None,
            )

        return ActionResult(kind, text, context)

    async def analyze_email(self, item: HostItem) -> ActionResult:
        return await self.execute_action(item, ActionRequest(ActionKind.ANALYZE))

    async def summarize_email(self, item: HostItem) -> ActionResult:
        return await self.execute_action(item, ActionRequest(ActionKind.SUMMARIZE))

    async def generate_reply(self, item: HostItem) -> ActionResult:
        return await self.execute_action(item, ActionRequest(ActionKind.REPLY))

    async def translate_email(self, item: HostItem, target_language: str) -> ActionResult:
        return await self.execute_action(
            item, ActionRequest(ActionKind.TRANSLATE, target_language=target_language)
        )

    async def extract_calendar_data(self, item: HostItem) -> ActionResult:
        return await self.execute_action(item, ActionRequest(ActionKind.CALENDAR))

    async def execute_custom_action(self, item: HostItem, custom_prompt: str) -> ActionResult:
        return await self.execute_action(
            item, ActionRequest(ActionKind.CUSTOM, custom_prompt=custom_prompt)
        )

    async def create_appointment(self, event_data: Mapping[str, Any]) -> AppointmentDraft:
        """Open the host's new-appointment form pre-filled from ``event_data``."""
        form = self.mailbox.appointment_form() if self.mailbox else None
        if form is None:
            raise NoInjectionSurfaceError("Host offers no new-appointment form")
        draft = appointment_draft_from_event(event_data)
        await form.display(draft)
        logger.info(f"Opened appointment form for {draft.subject!r}")
        return draft

    async def insert_text_into_email(self, text: str) -> str:
        """Insert ``text`` into the compose body, or open a reply form with it.

        Returns the name of the surface used.
        """
        compose = self.mailbox.compose_body() if self.mailbox else None
        if compose is not None:
            await compose.set_selected_data(text, CoercionType.TEXT)
            return SURFACE_COMPOSE_BODY
        reply_form = self.mailbox.reply_form() if self.mailbox else None
        if reply_form is not None:
            await reply_form.display(text)
            return SURFACE_REPLY_FORM
        raise NoInjectionSurfaceError(
            "Cannot insert text: not composing and no reply form available"
        )


def parse_schedule(text: str) -> dict[str, Any]:
    """Pull the event object out of generated text.

    A fenced code block wins; otherwise the outermost ``{...}`` span is used.
    """
    match = _FENCED_JSON.search(text or "")
    if match:
        candidate = match.group(1)
    else:
        match = _BRACED_JSON.search(text or "")
        if not match:
            raise ResponseParseError("No JSON object found in response")
        candidate = match.group(0)
    try:
        data = json.loads(candidate)
    except ValueError as e:
        raise ResponseParseError(f"Invalid JSON in response: {e}") from e
    if not isinstance(data, dict):
        raise ResponseParseError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def appointment_draft_from_event(event_data: Mapping[str, Any]) -> AppointmentDraft:
    """Defaults: subject "Neuer Termin", start now, end one hour after start."""
    start = _parse_datetime(event_data.get("start")) or datetime.now().astimezone()
    end = _parse_datetime(event_data.get("end")) or start + timedelta(hours=1)
    attendees = []
    for attendee in event_data.get("attendees") or []:
        if isinstance(attendee, Mapping):
            attendee = attendee.get("email") or attendee.get("name") or ""
        if attendee:
            attendees.append(str(attendee))
    return AppointmentDraft(
        subject=event_data.get("subject") or DEFAULT_APPOINTMENT_SUBJECT,
        start=start,
        end=end,
        location=event_data.get("location") or "",
        body=event_data.get("description") or "",
        attendees=tuple(attendees),
    )


def _parse_datetime(value: Any) -> datetime | None:
    if isinstance(value, datetime):
        return value
    if not value:
        return None
    try:
        return parser.parse(str(value))
    except (ValueError, OverflowError):
        logger.warning(f"Unparseable date in event data: {value!r}")
        return None
