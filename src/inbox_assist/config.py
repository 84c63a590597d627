"""Assistant configuration: dataclasses, JSON file loading and env overrides.

The file format is the add-in's ``triton-config.json``::

    {
      "serverConfig": {"url": ..., "timeout": ..., "maxRetries": ..., "retryDelay": ..., "debug": ...},
      "modelConfig": {"name": ..., "defaultParameters": {...}},
      "securityConfig": {"apiKey": ...},
      "promptTemplates": {"analyze": ..., ...},
      "contextConfig": {"includeAttachments": ..., ...}
    }

Every section and key is optional; anything missing keeps its default.
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from inbox_assist.exceptions import ConfigError
from inbox_assist.inference.models import GenerationParameters

logger = logging.getLogger(__name__)

CONFIG_ENV_VAR = "INBOX_ASSIST_CONFIG"

DEFAULT_PROMPT_TEMPLATES: dict[str, str] = {
    "analyze": "Analysiere diese E-Mail und gib mir die wichtigsten Punkte und erforderlichen Aktionen:\n\n{email_context}",
    "summarize": "Fasse diese E-Mail kurz und prägnant zusammen:\n\n{email_context}",
    "reply": "Generiere eine professionelle Antwort auf diese E-Mail:\n\n{email_context}",
    "translate": "Übersetze diese E-Mail ins {target_language}:\n\n{email_context}",
    "calendar": (
        "Extrahiere Informationen für einen Kalendereintrag aus dieser E-Mail "
        "(Datum, Uhrzeit, Teilnehmer, Ort, Thema) und formatiere sie als JSON:\n\n{email_context}"
    ),
    "custom": "{custom_prompt}\n\n{email_context}",
}


def _default_generation_parameters() -> GenerationParameters:
    return GenerationParameters(
        max_tokens=1024,
        temperature=0.7,
        top_p=0.9,
        stop_sequences=("\n###", "###", "</answer>"),
        return_full_text=False,
    )


@dataclass
class ServerConfig:
    url: str = "http://localhost:8000"
    timeout_ms: int = 30000
    max_retries: int = 3
    retry_delay_ms: int = 1000
    debug: bool = False


@dataclass
class ModelConfig:
    name: str = "llm_model"
    default_parameters: GenerationParameters = field(default_factory=_default_generation_parameters)


@dataclass
class SecurityConfig:
    api_key: str | None = None


@dataclass
class ContextConfig:
    """Toggles for what the context extractor reads from a host item."""

    include_attachments: bool = True
    include_recipients: bool = True
    include_cc: bool = True
    include_bcc: bool = False
    include_thread: bool = False
    max_body_length: int = 10000
    max_thread_depth: int = 3


# (file key, attribute) pairs per section
_SERVER_KEYS = [
    ("url", "url"),
    ("timeout", "timeout_ms"),
    ("maxRetries", "max_retries"),
    ("retryDelay", "retry_delay_ms"),
    ("debug", "debug"),
]
_CONTEXT_KEYS = [
    ("includeAttachments", "include_attachments"),
    ("includeRecipients", "include_recipients"),
    ("includeCc", "include_cc"),
    ("includeBcc", "include_bcc"),
    ("includeThread", "include_thread"),
    ("maxBodyLength", "max_body_length"),
    ("maxThreadDepth", "max_thread_depth"),
]


@dataclass
class AssistantConfig:
    """Everything the assistant needs to talk to the server and build prompts."""

    server: ServerConfig = field(default_factory=ServerConfig)
    model: ModelConfig = field(default_factory=ModelConfig)
    security: SecurityConfig = field(default_factory=SecurityConfig)
    context: ContextConfig = field(default_factory=ContextConfig)
    prompt_templates: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PROMPT_TEMPLATES))
    ui_settle_delay: float = 0.5

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AssistantConfig:
        """Build from the camelCase file format."""
        if not isinstance(data, dict):
            raise ConfigError(f"Config root must be an object, got {type(data).__name__}")
        config = cls()

        _apply_keys(config.server, _section(data, "serverConfig"), _SERVER_KEYS)
        _apply_keys(config.context, _section(data, "contextConfig"), _CONTEXT_KEYS)

        model = _section(data, "modelConfig")
        if "name" in model:
            config.model.name = _coerce("name", model["name"], config.model.name)
        if "defaultParameters" in model:
            parameters = model["defaultParameters"]
            if parameters is not None and not isinstance(parameters, dict):
                raise ConfigError("defaultParameters must be an object")
            config.model.default_parameters = GenerationParameters.from_mapping(parameters)

        security = _section(data, "securityConfig")
        if security.get("apiKey"):
            config.security.api_key = _coerce("apiKey", security["apiKey"], "")

        templates = data.get("promptTemplates")
        if templates:
            if not isinstance(templates, dict):
                raise ConfigError("promptTemplates must be an object")
            config.prompt_templates.update(templates)

        if "uiSettleDelay" in data:
            config.ui_settle_delay = _coerce("uiSettleDelay", data["uiSettleDelay"], config.ui_settle_delay)
        return config

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the camelCase file format."""
        data: dict[str, Any] = {
            "serverConfig": {key: getattr(self.server, attr) for key, attr in _SERVER_KEYS},
            "modelConfig": {
                "name": self.model.name,
                "defaultParameters": self.model.default_parameters.to_dict(),
            },
            "promptTemplates": dict(self.prompt_templates),
            "contextConfig": {key: getattr(self.context, attr) for key, attr in _CONTEXT_KEYS},
            "uiSettleDelay": self.ui_settle_delay,
        }
        if self.security.api_key:
            data["securityConfig"] = {"apiKey": self.security.api_key}
        return data

    @classmethod
    def load(cls, path: str | Path | None = None) -> AssistantConfig:
        """Load from ``path`` (or ``$INBOX_ASSIST_CONFIG``), then apply env overrides.

        A missing file falls back to the built-in defaults.
        """
        path = path or os.environ.get(CONFIG_ENV_VAR)
        config = cls()
        if path:
            path = Path(path)
            if path.exists():
                try:
                    data = json.loads(path.read_text(encoding="utf-8"))
                except (OSError, ValueError) as e:
                    raise ConfigError(f"Failed to read config {path}: {e}") from e
                config = cls.from_dict(data)
                logger.info(f"Loaded config from {path}")
            else:
                logger.warning(f"Config file {path} not found, using defaults")
        config.apply_env()
        return config

    def save(self, path: str | Path) -> None:
        path = Path(path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(self.to_dict(), indent=2, ensure_ascii=False), encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to write config {path}: {e}") from e

    def apply_env(self) -> None:
        """Override server URL, model, API key and debug flag from the environment."""
        if os.environ.get("INBOX_ASSIST_SERVER_URL"):
            self.server.url = os.environ["INBOX_ASSIST_SERVER_URL"]
        if os.environ.get("INBOX_ASSIST_MODEL"):
            self.model.name = os.environ["INBOX_ASSIST_MODEL"]
        if os.environ.get("INBOX_ASSIST_API_KEY"):
            self.security.api_key = os.environ["INBOX_ASSIST_API_KEY"]
        if os.environ.get("INBOX_ASSIST_DEBUG"):
            self.server.debug = os.environ["INBOX_ASSIST_DEBUG"].lower() in ("1", "true", "yes")


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ConfigError(f"{name} must be an object, got {type(section).__name__}")
    return section


def _apply_keys(target: Any, section: dict[str, Any], keys: list[tuple[str, str]]) -> None:
    for key, attr in keys:
        if key in section:
            setattr(target, attr, _coerce(key, section[key], getattr(target, attr)))


def _coerce(key: str, value: Any, current: Any) -> Any:
    """Convert ``value`` to the type of the field's current value."""
    if isinstance(current, bool):
        if not isinstance(value, bool):
            raise ConfigError(f"{key} must be true or false, got {value!r}")
        return value
    if isinstance(current, (int, float)):
        if isinstance(value, bool):
            raise ConfigError(f"{key} must be a number, got {value!r}")
        try:
            return type(current)(value)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"{key} must be a number, got {value!r}") from e
    if isinstance(current, str) and not isinstance(value, str):
        raise ConfigError(f"{key} must be a string, got {value!r}")
    return value
