"""Unified exception hierarchy for inbox-assist."""

from __future__ import annotations


class InboxAssistError(Exception):
    """Base exception for all inbox-assist errors."""


# Config
class ConfigError(InboxAssistError):
    """Configuration file could not be read or is malformed."""


# Inference
class InferenceError(InboxAssistError):
    """Base exception for inference client operations."""


class InferenceTimeoutError(InferenceError):
    """A request did not complete within the configured timeout."""

    def __init__(self, timeout_ms: int):
        super().__init__(f"Request timed out after {timeout_ms}ms")
        self.timeout_ms = timeout_ms


class InferenceHTTPError(InferenceError):
    """The inference service answered with a non-2xx status."""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"HTTP error {status_code}: {body}")
        self.status_code = status_code
        self.body = body


class InferenceNetworkError(InferenceError):
    """The request never produced a response (DNS, refused connection, reset)."""


class InferenceResponseError(InferenceError):
    """A 2xx response carried a body that is not valid JSON."""


class InferenceRetryError(InferenceError):
    """Every attempt failed; carries the last underlying error."""

    def __init__(self, attempts: int, last_error: Exception):
        super().__init__(
            f"All {attempts} request attempts failed. Last error: {last_error}"
        )
        self.attempts = attempts
        self.last_error = last_error


# Context extraction
class ContextError(InboxAssistError):
    """Base exception for context extraction."""


class UnsupportedItemKindError(ContextError):
    """The host item is neither an email nor an appointment."""

    def __init__(self, kind: object):
        super().__init__(f"Unsupported item kind: {kind}")
        self.kind = kind


class ExtractionError(ContextError):
    """A field could not be read from the host item."""


class ThreadUnavailableError(ExtractionError):
    """Conversation thread retrieval is not available on this host."""


# Actions
class ActionError(InboxAssistError):
    """Base exception for action orchestration."""


class PromptRenderError(ActionError):
    """A prompt template could not be rendered."""


class ResponseParseError(ActionError):
    """Structured data could not be parsed out of generated text."""


# Injection
class InjectionError(InboxAssistError):
    """Base exception for writing generated text back into the host."""


class NoInjectionSurfaceError(InjectionError):
    """The host exposes neither a reply form nor a compose body."""
