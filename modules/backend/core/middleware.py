"""
Request Context Middleware.

Request tracking, timing and context propagation for both services.
The gateway forwards its request ID to the backend in X-Request-ID, so a
single webhook delivery can be followed through both services' logs.
"""

import time
import uuid

import structlog
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from modules.backend.core.logging import get_logger

logger = get_logger(__name__)

# Callers that identify themselves with X-Caller-ID
KNOWN_CALLERS = {"gateway", "cli", "telegram", "internal"}


def get_request_id() -> str | None:
    """Request ID bound to the current context, if any."""
    return structlog.contextvars.get_contextvars().get("request_id")


class RequestContextMiddleware(BaseHTTPMiddleware):
    """
    Middleware that adds request context to every request.

    Headers:
    - X-Request-ID: Unique request identifier (generated if not provided)
    - X-Caller-ID: Calling component (gateway, cli, telegram, internal)
    - X-Response-Time: Response duration in milliseconds

    All logs within a request include request_id, caller, service,
    method and path.
    """

    def __init__(self, app: ASGIApp, service: str = "backend") -> None:
        super().__init__(app)
        self.service = service

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        """Process request with context tracking."""
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())

        caller = request.headers.get("X-Caller-ID", "unknown").lower()
        if caller not in KNOWN_CALLERS:
            caller = "unknown"

        start = time.perf_counter()

        request.state.request_id = request_id
        request.state.caller = caller

        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            caller=caller,
            service=self.service,
            method=request.method,
            path=request.url.path,
        )

        logger.debug(
            "Request started",
            extra={"client_host": request.client.host if request.client else None},
        )

        try:
            response = await call_next(request)

            duration_ms = int((time.perf_counter() - start) * 1000)
            response.headers["X-Request-ID"] = request_id
            response.headers["X-Response-Time"] = f"{duration_ms}ms"

            logger.debug(
                "Request completed",
                extra={
                    "status_code": response.status_code,
                    "duration_ms": duration_ms,
                },
            )

            return response

        except Exception as exc:
            logger.error(
                "Request failed with exception",
                extra={
                    "duration_ms": int((time.perf_counter() - start) * 1000),
                    "error_type": type(exc).__name__,
                },
            )
            raise

        finally:
            structlog.contextvars.clear_contextvars()
