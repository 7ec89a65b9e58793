"""
Backend Link Client.

Async HTTP client the bot gateway uses to call the backend service.
Requests carry X-Caller-ID: gateway and the current request ID, so one
webhook delivery can be traced across both services.

Error responses are turned back into the application exception named by
their error code (InvalidArgumentError for VAL_INVALID_ARGUMENT, ...).
Transport failures and an open circuit raise ExternalServiceError. Calls
are never retried.

Usage:
    client = BackendClient()
    response = await client.process_update(update_request)
    await client.close()
"""

from typing import Any, TypeVar

import aiobreaker
import httpx
from pydantic import BaseModel, ValidationError

from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    InvalidArgumentError,
    NotFoundError,
    error_from_code,
)
from modules.backend.core.logging import get_logger, log_with_source
from modules.backend.core.middleware import get_request_id
from modules.backend.core.resilience import create_circuit_breaker
from modules.backend.schemas.bot import (
    SendMessageRequest,
    SendMessageResponse,
    UpdateRequest,
    UpdateResponse,
)

logger = get_logger(__name__)

ResponseT = TypeVar("ResponseT", bound=BaseModel)

PROCESS_UPDATE_PATH = "/api/v1/bot/process-update"
SEND_MESSAGE_PATH = "/api/v1/bot/send-message"

# Client errors say nothing about backend health
_CLIENT_ERRORS: list[type[BaseException]] = [InvalidArgumentError, NotFoundError, ConflictError]


class BackendClient:
    """
    HTTP client for the backend link.

    Args:
        base_url: Backend base URL. If None, read from gateway.yaml.
        timeout: Request timeout in seconds. If None, read from gateway.yaml.
        http_client: Pre-built httpx client (e.g. with an ASGI transport in tests).
        breaker: Circuit breaker. If None, built from gateway.yaml.
    """

    def __init__(
        self,
        base_url: str | None = None,
        timeout: float | None = None,
        http_client: httpx.AsyncClient | None = None,
        breaker: aiobreaker.CircuitBreaker | None = None,
    ) -> None:
        backend_config = get_app_config().gateway.backend
        self.base_url = (base_url or backend_config.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else backend_config.timeout_seconds
        self._client = http_client
        self._breaker = breaker or create_circuit_breaker(
            "backend",
            fail_max=backend_config.circuit_breaker.fail_max,
            reset_timeout_seconds=backend_config.circuit_breaker.reset_timeout_seconds,
            exclude=_CLIENT_ERRORS,
        )

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"X-Caller-ID": "gateway"},
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def process_update(self, request: UpdateRequest) -> UpdateResponse:
        """
        Route one update envelope through the backend.

        Raises:
            InvalidArgumentError: If the envelope carries nothing routable
            ExternalServiceError: If the backend is unreachable or failed
        """
        return await self._call(PROCESS_UPDATE_PATH, request, UpdateResponse)

    async def send_message(self, request: SendMessageRequest) -> SendMessageResponse:
        """
        Push a message to a chat through the backend.

        Raises:
            InvalidArgumentError: If chat_id is 0
            ExternalServiceError: If the backend is unreachable or failed
        """
        return await self._call(SEND_MESSAGE_PATH, request, SendMessageResponse)

    async def _call(
        self,
        path: str,
        payload: BaseModel,
        response_model: type[ResponseT],
    ) -> ResponseT:
        client = await self._get_client()
        body = payload.model_dump(mode="json", by_alias=True, exclude_none=True)

        headers = {"X-Caller-ID": "gateway"}
        request_id = get_request_id()
        if request_id:
            headers["X-Request-ID"] = request_id

        log_with_source(logger, "gateway", "debug", "Backend request", path=path)

        try:
            return await self._breaker.call_async(
                self._post, client, path, body, headers, response_model
            )
        except aiobreaker.CircuitBreakerError as e:
            log_with_source(logger, "gateway", "error", "Backend circuit open", path=path)
            raise ExternalServiceError(f"backend unavailable: {e}") from e
        except httpx.HTTPError as e:
            log_with_source(
                logger, "gateway", "error", "Backend request failed", path=path, error=str(e)
            )
            raise ExternalServiceError(f"backend request failed: {e}") from e

    async def _post(
        self,
        client: httpx.AsyncClient,
        path: str,
        body: dict[str, Any],
        headers: dict[str, str],
        response_model: type[ResponseT],
    ) -> ResponseT:
        response = await client.post(path, json=body, headers=headers)

        log_with_source(
            logger,
            "gateway",
            "debug",
            "Backend response",
            path=path,
            status_code=response.status_code,
        )

        try:
            envelope = response.json()
        except ValueError as e:
            raise ExternalServiceError(
                f"backend returned non-JSON response (HTTP {response.status_code})"
            ) from e
        if not isinstance(envelope, dict):
            raise ExternalServiceError(
                f"backend returned an unexpected body (HTTP {response.status_code})"
            )

        if response.is_error or not envelope.get("success", False):
            error = envelope.get("error") or {}
            raise error_from_code(
                error.get("code", "SYS_EXTERNAL_SERVICE_ERROR"),
                error.get("message", f"backend returned HTTP {response.status_code}"),
            )

        try:
            return response_model.model_validate(envelope.get("data"))
        except ValidationError as e:
            raise ExternalServiceError(f"backend returned an unexpected payload: {e}") from e
