"""
Unit Tests for the Backend Link Client.

The backend is replaced by an httpx.MockTransport; tests cover envelope
unwrapping, error code mapping, header propagation and the circuit breaker.
"""

import httpx
import pytest
import structlog

from modules.backend.core.exceptions import (
    ApplicationError,
    DatabaseError,
    ExternalServiceError,
    InvalidArgumentError,
)
from modules.backend.core.resilience import create_circuit_breaker
from modules.backend.schemas.bot import (
    CallbackQuery,
    SendMessageRequest,
    UpdateRequest,
)
from modules.telegram.services.backend_client import (
    PROCESS_UPDATE_PATH,
    SEND_MESSAGE_PATH,
    BackendClient,
)


def _ok(data: dict) -> httpx.Response:
    return httpx.Response(200, json={"success": True, "data": data, "error": None, "metadata": {}})


def _error(status: int, code: str, message: str) -> httpx.Response:
    return httpx.Response(
        status,
        json={"success": False, "data": None, "error": {"code": code, "message": message}},
    )


class _Backend:
    """Records requests and answers with a canned response or exception."""

    def __init__(self, answer):
        self.answer = answer
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if isinstance(self.answer, Exception):
            raise self.answer
        return self.answer


def _client(backend: _Backend, fail_max: int = 5) -> BackendClient:
    return BackendClient(
        base_url="http://backend",
        http_client=httpx.AsyncClient(
            transport=httpx.MockTransport(backend),
            base_url="http://backend",
        ),
        breaker=create_circuit_breaker(
            "backend",
            fail_max=fail_max,
            reset_timeout_seconds=60,
            exclude=[InvalidArgumentError],
        ),
    )


@pytest.fixture
def update_request() -> UpdateRequest:
    return UpdateRequest(
        update_id=1,
        callback_query=CallbackQuery(id="c1", user_id=9, chat_id=42, message_id=5, data="help"),
    )


class TestProcessUpdate:
    async def test_unwraps_envelope(self, update_request):
        backend = _Backend(
            _ok({"success": True, "error": None, "messages": [{"chat_id": 42, "text": "hi"}]})
        )

        response = await _client(backend).process_update(update_request)

        assert response.success is True
        assert response.messages[0].chat_id == 42
        assert response.messages[0].text == "hi"
        assert backend.requests[0].url.path == PROCESS_UPDATE_PATH

    async def test_sends_envelope_and_caller(self, update_request):
        backend = _Backend(_ok({"success": True, "messages": []}))

        await _client(backend).process_update(update_request)

        sent = backend.requests[0]
        assert sent.headers["X-Caller-ID"] == "gateway"
        body = UpdateRequest.model_validate_json(sent.content)
        assert body == update_request

    async def test_forwards_request_id(self, update_request):
        backend = _Backend(_ok({"success": True, "messages": []}))
        structlog.contextvars.bind_contextvars(request_id="req-123")
        try:
            await _client(backend).process_update(update_request)
        finally:
            structlog.contextvars.clear_contextvars()

        assert backend.requests[0].headers["X-Request-ID"] == "req-123"

    async def test_aggregated_failure_is_returned(self, update_request):
        backend = _Backend(
            _ok({"success": False, "error": "errors: [failed to save callback: locked]"})
        )

        response = await _client(backend).process_update(update_request)

        assert response.success is False
        assert response.error == "errors: [failed to save callback: locked]"

    @pytest.mark.parametrize(
        "status, code, error_cls",
        [
            (400, "VAL_INVALID_ARGUMENT", InvalidArgumentError),
            (503, "SYS_DATABASE_ERROR", DatabaseError),
            (502, "SYS_EXTERNAL_SERVICE_ERROR", ExternalServiceError),
        ],
    )
    async def test_error_envelope_rebuilds_exception(
        self, update_request, status, code, error_cls
    ):
        backend = _Backend(_error(status, code, "no message or callback provided"))

        with pytest.raises(error_cls, match="no message or callback provided"):
            await _client(backend).process_update(update_request)

    async def test_unknown_error_code(self, update_request):
        backend = _Backend(_error(500, "SYS_INTERNAL_ERROR", "An unexpected error occurred"))

        with pytest.raises(ApplicationError) as exc_info:
            await _client(backend).process_update(update_request)

        assert exc_info.value.code == "SYS_INTERNAL_ERROR"

    async def test_non_json_response(self, update_request):
        backend = _Backend(httpx.Response(502, text="Bad Gateway"))

        with pytest.raises(ExternalServiceError, match="non-JSON"):
            await _client(backend).process_update(update_request)

    async def test_unexpected_payload(self, update_request):
        backend = _Backend(_ok({"messages": "not a list"}))

        with pytest.raises(ExternalServiceError, match="unexpected payload"):
            await _client(backend).process_update(update_request)

    async def test_transport_error(self, update_request):
        backend = _Backend(httpx.ConnectError("connection refused"))

        with pytest.raises(ExternalServiceError, match="connection refused"):
            await _client(backend).process_update(update_request)


class TestSendMessage:
    async def test_success(self):
        backend = _Backend(_ok({"success": True, "error": None}))

        response = await _client(backend).send_message(SendMessageRequest(chat_id=42, text="x"))

        assert response.success is True
        assert backend.requests[0].url.path == SEND_MESSAGE_PATH

    async def test_zero_chat_id(self):
        backend = _Backend(_error(400, "VAL_INVALID_ARGUMENT", "Chat ID must not be 0"))

        with pytest.raises(InvalidArgumentError, match="Chat ID must not be 0"):
            await _client(backend).send_message(SendMessageRequest(chat_id=0, text="x"))


class TestCircuitBreaker:
    async def test_opens_after_repeated_failures(self, update_request):
        backend = _Backend(httpx.ConnectError("connection refused"))
        client = _client(backend, fail_max=2)

        for _ in range(3):
            with pytest.raises(ExternalServiceError):
                await client.process_update(update_request)

        assert len(backend.requests) == 2

    async def test_open_circuit_fails_fast(self, update_request):
        backend = _Backend(httpx.ConnectError("connection refused"))
        client = _client(backend, fail_max=1)

        with pytest.raises(ExternalServiceError):
            await client.process_update(update_request)
        with pytest.raises(ExternalServiceError, match="backend unavailable"):
            await client.process_update(update_request)

    async def test_client_errors_keep_circuit_closed(self, update_request):
        backend = _Backend(_error(400, "VAL_INVALID_ARGUMENT", "no message or callback provided"))
        client = _client(backend, fail_max=1)

        for _ in range(3):
            with pytest.raises(InvalidArgumentError):
                await client.process_update(update_request)

        assert len(backend.requests) == 3


class TestClose:
    async def test_close_releases_client(self):
        client = _client(_Backend(_ok({"success": True})))
        http_client = await client._get_client()

        await client.close()

        assert http_client.is_closed
