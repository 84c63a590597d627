"""Triton-style text-generation client with timeout and retry, sync and async."""

from __future__ import annotations

import asyncio
import json
import logging
import time
from typing import TYPE_CHECKING, Any, Sequence

from inbox_assist.exceptions import (
    InferenceError,
    InferenceHTTPError,
    InferenceNetworkError,
    InferenceResponseError,
    InferenceRetryError,
    InferenceTimeoutError,
)
from inbox_assist.inference.models import GeneratedResponse, GenerationParameters, ModelInfo

if TYPE_CHECKING:
    import httpx

    from inbox_assist.config import AssistantConfig

logger = logging.getLogger(__name__)

HEALTH_ENDPOINT = "/v2/health/ready"
MODELS_ENDPOINT = "/v2/models"


class _InferenceClientBase:
    """Request construction and response decoding shared by both clients.

    Args:
        base_url: Server root, e.g. ``http://localhost:8000``.
        model_name: Model served under ``/v2/models/{model_name}``.
        api_key: Sent as a bearer token when set.
        timeout_ms: Per-attempt timeout.
        max_retries: Total number of attempts per request (not extra retries).
        retry_delay_ms: Base delay; the wait before attempt ``n + 1`` is
            ``retry_delay_ms * n``.
        debug: Log request and response bodies.
        transport: Optional httpx transport, mainly for tests.
    """

    def __init__(
        self,
        base_url: str,
        model_name: str,
        api_key: str | None = None,
        timeout_ms: int = 30000,
        max_retries: int = 3,
        retry_delay_ms: int = 1000,
        debug: bool = False,
        transport: httpx.BaseTransport | httpx.AsyncBaseTransport | None = None,
    ):
        if not base_url:
            raise InferenceError("Inference server URL is required.")
        if max_retries < 1:
            raise InferenceError(f"max_retries must be at least 1, got {max_retries}")
        try:
            import httpx  # noqa: F401
        except ImportError:
            raise ImportError(
                "httpx is required for the inference client. "
                "Install with: pip install inbox-assist"
            )
        self.base_url = base_url.rstrip("/")
        self.model_name = model_name
        self.api_key = api_key
        self.timeout_ms = timeout_ms
        self.max_retries = max_retries
        self.retry_delay_ms = retry_delay_ms
        self.debug = debug
        self._transport = transport

    @classmethod
    def from_config(cls, config: AssistantConfig, transport=None):
        """Build a client from the ``server``, ``model`` and ``security`` sections."""
        return cls(
            base_url=config.server.url,
            model_name=config.model.name,
            api_key=config.security.api_key,
            timeout_ms=config.server.timeout_ms,
            max_retries=config.server.max_retries,
            retry_delay_ms=config.server.retry_delay_ms,
            debug=config.server.debug,
            transport=transport,
        )

    @property
    def model_endpoint(self) -> str:
        return f"{MODELS_ENDPOINT}/{self.model_name}"

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.api_key:
            headers["Authorization"] = f"Bearer {self.api_key}"
        return headers

    @staticmethod
    def _generate_body(
        parameters: GenerationParameters | dict | None, **prompt_fields: Any
    ) -> dict[str, Any]:
        params = GenerationParameters().merged(parameters)
        return {**prompt_fields, **params.to_request_fields()}

    def _retry_delay(self, attempt: int) -> float:
        """Seconds to wait after the 1-based ``attempt`` failed."""
        return self.retry_delay_ms * attempt / 1000

    def _decode(self, status_code: int, content: bytes) -> Any:
        if not 200 <= status_code < 300:
            raise InferenceHTTPError(status_code, content.decode("utf-8", errors="replace"))
        try:
            payload = json.loads(content)
        except ValueError as e:
            raise InferenceResponseError(f"Invalid JSON in response: {e}") from e
        self._log_debug("Response received", payload)
        return payload

    def _log_attempt_failure(self, attempt: int, error: Exception) -> None:
        logger.warning(f"Attempt {attempt}/{self.max_retries} failed: {error}")

    def _log_debug(self, message: str, data: Any = None) -> None:
        if not self.debug:
            return
        if data is None:
            logger.debug(message)
        else:
            logger.debug(f"{message}: {json.dumps(data, default=str)[:2000]}")


class InferenceClient(_InferenceClientBase):
    """Blocking client for the inference service."""

    def generate_text(
        self, prompt: str, parameters: GenerationParameters | dict | None = None
    ) -> GeneratedResponse:
        """Generate text for a single prompt."""
        body = self._generate_body(parameters, prompt=prompt)
        payload = self._send_request(f"{self.model_endpoint}/generate", body)
        return GeneratedResponse.from_payload(payload)

    def generate_batch(
        self, prompts: Sequence[str], parameters: GenerationParameters | dict | None = None
    ) -> list[GeneratedResponse]:
        """Generate text for several prompts in one request."""
        body = self._generate_body(parameters, prompts=list(prompts))
        payload = self._send_request(f"{self.model_endpoint}/generate_batch", body)
        return GeneratedResponse.batch_from_payload(payload)

    def get_model_info(self) -> ModelInfo:
        return ModelInfo.from_payload(self._send_request(self.model_endpoint, method="GET"))

    def list_models(self) -> list[ModelInfo]:
        return ModelInfo.list_from_payload(self._send_request(MODELS_ENDPOINT, method="GET"))

    def test_connection(self) -> bool:
        """True iff the server reports ``READY``. Never raises."""
        try:
            payload = self._send_request(HEALTH_ENDPOINT, method="GET")
        except Exception as e:
            logger.info(f"Connection test failed: {e}")
            return False
        return isinstance(payload, dict) and payload.get("status") == "READY"

    def _send_request(self, endpoint: str, data: dict | None = None, method: str = "POST") -> Any:
        url = self.base_url + endpoint
        self._log_debug(f"Sending {method} request to {url}", data)

        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return self._attempt(url, method, data)
            except InferenceError as e:
                last_error = e
                self._log_attempt_failure(attempt, e)
                if attempt < self.max_retries:
                    time.sleep(self._retry_delay(attempt))

        raise InferenceRetryError(self.max_retries, last_error)

    def _attempt(self, url: str, method: str, data: dict | None) -> Any:
        """One request, cut off once ``timeout_ms`` has elapsed in total.

        httpx only bounds each connect/read/write, so the body is streamed
        and checked against a deadline chunk by chunk.
        """
        import httpx

        deadline = time.monotonic() + self.timeout_ms / 1000
        try:
            with httpx.Client(
                timeout=self.timeout_ms / 1000, transport=self._transport
            ) as client:
                with client.stream(
                    method,
                    url,
                    headers=self._headers(),
                    json=data if method == "POST" else None,
                ) as response:
                    chunks = []
                    for chunk in response.iter_bytes():
                        if time.monotonic() > deadline:
                            raise InferenceTimeoutError(self.timeout_ms)
                        chunks.append(chunk)
                    status_code = response.status_code
        except httpx.TimeoutException as e:
            raise InferenceTimeoutError(self.timeout_ms) from e
        except httpx.RequestError as e:
            raise InferenceNetworkError(f"Network error: {e}") from e
        if time.monotonic() > deadline:
            raise InferenceTimeoutError(self.timeout_ms)
        return self._decode(status_code, b"".join(chunks))


class AsyncInferenceClient(_InferenceClientBase):
    """Asynchronous client for the inference service.

    Each attempt runs under a hard deadline of ``timeout_ms`` in addition to
    httpx's own connect/read timeouts, so a server that accepts the
    connection and then stalls is still cut off.
    """

    async def generate_text(
        self, prompt: str, parameters: GenerationParameters | dict | None = None
    ) -> GeneratedResponse:
        """Generate text for a single prompt."""
        body = self._generate_body(parameters, prompt=prompt)
        payload = await self._send_request(f"{self.model_endpoint}/generate", body)
        return GeneratedResponse.from_payload(payload)

    async def generate_batch(
        self, prompts: Sequence[str], parameters: GenerationParameters | dict | None = None
    ) -> list[GeneratedResponse]:
        """Generate text for several prompts in one request."""
        body = self._generate_body(parameters, prompts=list(prompts))
        payload = await self._send_request(f"{self.model_endpoint}/generate_batch", body)
        return GeneratedResponse.batch_from_payload(payload)

    async def get_model_info(self) -> ModelInfo:
        return ModelInfo.from_payload(await self._send_request(self.model_endpoint, method="GET"))

    async def list_models(self) -> list[ModelInfo]:
        return ModelInfo.list_from_payload(await self._send_request(MODELS_ENDPOINT, method="GET"))

    async def test_connection(self) -> bool:
        """True iff the server reports ``READY``. Never raises."""
        try:
            payload = await self._send_request(HEALTH_ENDPOINT, method="GET")
        except Exception as e:
            logger.info(f"Connection test failed: {e}")
            return False
        return isinstance(payload, dict) and payload.get("status") == "READY"

    async def _send_request(
        self, endpoint: str, data: dict | None = None, method: str = "POST"
    ) -> Any:
        url = self.base_url + endpoint
        self._log_debug(f"Sending {method} request to {url}", data)

        last_error: Exception | None = None
        for attempt in range(1, self.max_retries + 1):
            try:
                return await asyncio.wait_for(
                    self._attempt(url, method, data), timeout=self.timeout_ms / 1000
                )
            except asyncio.TimeoutError:
                last_error = InferenceTimeoutError(self.timeout_ms)
            except InferenceError as e:
                last_error = e
            self._log_attempt_failure(attempt, last_error)
            if attempt < self.max_retries:
                await asyncio.sleep(self._retry_delay(attempt))

        raise InferenceRetryError(self.max_retries, last_error)

    async def _attempt(self, url: str, method: str, data: dict | None) -> Any:
        import httpx

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout_ms / 1000, transport=self._transport
            ) as client:
                response = await client.request(
                    method,
                    url,
                    headers=self._headers(),
                    json=data if method == "POST" else None,
                )
        except httpx.TimeoutException as e:
            raise InferenceTimeoutError(self.timeout_ms) from e
        except httpx.RequestError as e:
            raise InferenceNetworkError(f"Network error: {e}") from e
        return self._decode(response.status_code, response.content)
