"""Tests for exception hierarchy."""

from inbox_assist.exceptions import (
    ActionError,
    ConfigError,
    ContextError,
    ExtractionError,
    InboxAssistError,
    InferenceError,
    InferenceHTTPError,
    InferenceNetworkError,
    InferenceResponseError,
    InferenceRetryError,
    InferenceTimeoutError,
    InjectionError,
    NoInjectionSurfaceError,
    PromptRenderError,
    ResponseParseError,
    ThreadUnavailableError,
    UnsupportedItemKindError,
)


def test_all_inherit_from_base():
    for exc_class in [
        ConfigError,
        InferenceError, InferenceTimeoutError, InferenceHTTPError,
        InferenceNetworkError, InferenceResponseError, InferenceRetryError,
        ContextError, UnsupportedItemKindError, ExtractionError, ThreadUnavailableError,
        ActionError, PromptRenderError, ResponseParseError,
        InjectionError, NoInjectionSurfaceError,
    ]:
        assert issubclass(exc_class, InboxAssistError)


def test_inference_hierarchy():
    for exc_class in [
        InferenceTimeoutError, InferenceHTTPError, InferenceNetworkError,
        InferenceResponseError, InferenceRetryError,
    ]:
        assert issubclass(exc_class, InferenceError)


def test_thread_unavailable_is_extraction_error():
    assert issubclass(ThreadUnavailableError, ExtractionError)
    assert issubclass(ExtractionError, ContextError)


def test_http_error_carries_status_and_body():
    e = InferenceHTTPError(503, "overloaded")
    assert e.status_code == 503
    assert e.body == "overloaded"
    assert str(e) == "HTTP error 503: overloaded"


def test_retry_error_names_attempts_and_last_error():
    last = InferenceTimeoutError(30000)
    e = InferenceRetryError(3, last)
    assert e.attempts == 3
    assert e.last_error is last
    assert "All 3 request attempts failed" in str(e)
    assert "timed out after 30000ms" in str(e)


def test_unsupported_item_kind_message():
    e = UnsupportedItemKindError("task")
    assert e.kind == "task"
    assert str(e) == "Unsupported item kind: task"
