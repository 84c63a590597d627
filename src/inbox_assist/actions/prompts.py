"""Prompt templates and placeholder substitution."""

from __future__ import annotations

import re
from typing import Mapping

from inbox_assist.exceptions import PromptRenderError

DEFAULT_PROMPT_TEMPLATE = "Analysiere den folgenden Inhalt:\n\n{email_context}"

_THREAD_HINT = (
    "Berücksichtige dabei den gesamten E-Mail-Verlauf und beziehe dich auf "
    "relevante Informationen aus früheren Nachrichten."
)

DEFAULT_REPLY_TEMPLATE = f"""Generiere eine professionelle und hilfreiche Antwort auf die folgende E-Mail.
Die Antwort sollte höflich, präzise und auf den Inhalt der E-Mail bezogen sein.
{_THREAD_HINT}
Schreibe die Antwort direkt, ohne Einleitungen wie "Hier ist meine Antwort:" oder ähnliches.
Verwende einen professionellen, aber freundlichen Ton und achte auf eine korrekte Anrede und Grußformel.

E-Mail-Kontext:
{{email_context}}"""

FORMAL_REPLY_TEMPLATE = f"""Generiere eine formelle und professionelle Antwort auf die folgende E-Mail.
Verwende eine geschäftliche Sprache, sei präzise und halte dich an formelle Anrede- und Grußformeln.
{_THREAD_HINT}

E-Mail-Kontext:
{{email_context}}"""

FRIENDLY_REPLY_TEMPLATE = f"""Generiere eine freundliche und persönliche Antwort auf die folgende E-Mail.
Verwende eine warme, zugängliche Sprache und einen konversationellen Ton.
{_THREAD_HINT}

E-Mail-Kontext:
{{email_context}}"""

SHORT_REPLY_TEMPLATE = f"""Generiere eine kurze und prägnante Antwort auf die folgende E-Mail.
Komme direkt auf den Punkt und halte die Antwort so knapp wie möglich, ohne wichtige Informationen auszulassen.
{_THREAD_HINT}

E-Mail-Kontext:
{{email_context}}"""

DETAILED_REPLY_TEMPLATE = f"""Generiere eine detaillierte und ausführliche Antwort auf die folgende E-Mail.
Gehe auf alle Punkte ein, biete zusätzliche Informationen an und sei gründlich in deiner Antwort.
{_THREAD_HINT}

E-Mail-Kontext:
{{email_context}}"""

_PLACEHOLDER = re.compile(r"\{([a-z_]+)\}")


def render_template(template: str, values: Mapping[str, str | None]) -> str:
    """Substitute ``{name}`` placeholders in one pass.

    Placeholders without a (non-None) value are left verbatim. Substituted
    text is never rescanned, so braces inside an email body are safe.
    """
    if not isinstance(template, str):
        raise PromptRenderError(f"Prompt template must be a string, got {type(template).__name__}")

    def _substitute(match: re.Match) -> str:
        value = values.get(match.group(1))
        return match.group(0) if value is None else value

    return _PLACEHOLDER.sub(_substitute, template)
