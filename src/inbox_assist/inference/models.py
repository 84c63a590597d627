"""Wire models for the inference service."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Mapping

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOKENS = 1024
DEFAULT_TEMPERATURE = 0.7
DEFAULT_TOP_P = 1.0


@dataclass(frozen=True)
class GenerationParameters:
    """Generation knobs sent with every generate request.

    Every field is optional. ``None`` means "not set here" so that merging
    and default substitution can tell an explicit ``0`` or ``False`` apart
    from an omitted value.
    """

    max_tokens: int | None = None
    temperature: float | None = None
    top_p: float | None = None
    stop_sequences: tuple[str, ...] | None = None
    return_full_text: bool | None = None

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any] | None) -> GenerationParameters:
        """Build from a plain dict such as a config file section.

        Keys that are not generation parameters are ignored.
        """
        if not mapping:
            return cls()
        known = {f.name for f in fields(cls)}
        values = {}
        for key, value in mapping.items():
            if key not in known:
                logger.debug(f"Ignoring unknown generation parameter {key!r}")
                continue
            if key == "stop_sequences" and value is not None:
                value = tuple(value)
            values[key] = value
        return cls(**values)

    def merged(
        self, overrides: GenerationParameters | Mapping[str, Any] | None
    ) -> GenerationParameters:
        """Return a copy where every value set in ``overrides`` wins."""
        if overrides is None:
            return self
        if not isinstance(overrides, GenerationParameters):
            overrides = GenerationParameters.from_mapping(overrides)
        changes = {
            f.name: getattr(overrides, f.name)
            for f in fields(overrides)
            if getattr(overrides, f.name) is not None
        }
        return replace(self, **changes)

    def to_request_fields(self) -> dict[str, Any]:
        """Request body fields with fixed defaults for anything unset."""
        return {
            "max_tokens": DEFAULT_MAX_TOKENS if self.max_tokens is None else self.max_tokens,
            "temperature": DEFAULT_TEMPERATURE if self.temperature is None else self.temperature,
            "top_p": DEFAULT_TOP_P if self.top_p is None else self.top_p,
            "stop_sequences": list(self.stop_sequences or ()),
            "return_full_text": bool(self.return_full_text),
        }

    def to_dict(self) -> dict[str, Any]:
        """Only the fields that are set, in config-file form."""
        out: dict[str, Any] = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if value is None:
                continue
            out[f.name] = list(value) if f.name == "stop_sequences" else value
        return out


@dataclass(frozen=True)
class GeneratedResponse:
    """Text produced by one generate call, plus the decoded payload."""

    text: str
    raw: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> GeneratedResponse:
        """Take the first ``responses[].text``, or a bare string payload."""
        if isinstance(payload, str):
            return cls(text=payload, raw=payload)
        if isinstance(payload, dict):
            responses = _responses(payload)
            if responses and isinstance(responses[0], dict):
                return cls(text=responses[0].get("text") or "", raw=payload)
        return cls(text="", raw=payload)

    @classmethod
    def batch_from_payload(cls, payload: Any) -> list[GeneratedResponse]:
        if isinstance(payload, dict):
            return [
                cls(text=(entry.get("text") or "") if isinstance(entry, dict) else str(entry), raw=entry)
                for entry in _responses(payload)
            ]
        if isinstance(payload, list):
            return [cls.from_payload(entry) for entry in payload]
        return [cls.from_payload(payload)]


def _responses(payload: dict) -> list:
    responses = payload.get("responses")
    return responses if isinstance(responses, list) else []


@dataclass(frozen=True)
class ModelInfo:
    """Model metadata as reported by the inference server."""

    name: str
    versions: list[str] = field(default_factory=list)
    platform: str = ""
    inputs: list[dict] = field(default_factory=list)
    outputs: list[dict] = field(default_factory=list)
    raw: Any = None

    @classmethod
    def from_payload(cls, payload: Any) -> ModelInfo:
        if not isinstance(payload, dict):
            return cls(name=str(payload), raw=payload)
        return cls(
            name=payload.get("name", ""),
            versions=[str(v) for v in payload.get("versions", [])],
            platform=payload.get("platform", ""),
            inputs=list(payload.get("inputs", [])),
            outputs=list(payload.get("outputs", [])),
            raw=payload,
        )

    @classmethod
    def list_from_payload(cls, payload: Any) -> list[ModelInfo]:
        """Accept a bare list or a ``{"models": [...]}`` envelope."""
        if isinstance(payload, dict):
            payload = payload.get("models", [])
        if not isinstance(payload, list):
            return []
        return [cls.from_payload(entry) for entry in payload]
