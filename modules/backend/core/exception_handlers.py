"""
Exception Handlers.

Turns exceptions raised while serving the backend link into ErrorResponse
envelopes. The bot gateway reads only error.code and error.message and
rebuilds the exception from them (modules.backend.core.exceptions.error_from_code),
so the code is the contract and the HTTP status is informational.

Usage:
    app = FastAPI()
    register_exception_handlers(app)
"""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from modules.backend.core.exceptions import (
    ApplicationError,
    ConflictError,
    DatabaseError,
    ExternalServiceError,
    InvalidArgumentError,
    NotFoundError,
)
from modules.backend.core.logging import get_logger
from modules.backend.schemas.base import ErrorDetail, ErrorResponse, ResponseMetadata

logger = get_logger(__name__)

EXCEPTION_STATUS_MAP: dict[type[ApplicationError], int] = {
    NotFoundError: 404,
    InvalidArgumentError: 400,
    ConflictError: 409,
    ExternalServiceError: 502,
    DatabaseError: 503,
}


def _get_request_id(request: Request) -> str | None:
    """Request ID set by RequestContextMiddleware, else the raw header."""
    if hasattr(request.state, "request_id"):
        return request.state.request_id
    return request.headers.get("x-request-id")


def _error_response(
    request: Request,
    status_code: int,
    code: str,
    message: str,
    details: dict[str, Any] | None = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        metadata=ResponseMetadata(request_id=_get_request_id(request)),
    )
    return JSONResponse(status_code=status_code, content=body.model_dump(mode="json"))


async def application_error_handler(
    request: Request,
    exc: ApplicationError,
) -> JSONResponse:
    """Application errors keep their own code and message."""
    status_code = EXCEPTION_STATUS_MAP.get(type(exc), 500)

    log = logger.error if status_code >= 500 else logger.warning
    log(
        "Request failed",
        extra={
            "code": exc.code,
            "error": exc.message,
            "status": status_code,
            "path": request.url.path,
        },
    )
    return _error_response(request, status_code, exc.code, exc.message)


def _field_path(loc: tuple[Any, ...]) -> str:
    # FastAPI prefixes body fields with "body"
    parts = [str(part) for part in loc]
    if parts and parts[0] == "body":
        parts = parts[1:]
    return ".".join(parts) or "body"


async def validation_error_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    """
    A request body that does not match the backend link schema.

    The message names the first offending field, e.g.
    "invalid request: message.chat_id: Field required".
    """
    fields = [
        {"field": _field_path(err.get("loc", ())), "message": err.get("msg", "invalid")}
        for err in exc.errors()
    ]
    first = fields[0] if fields else {"field": "body", "message": "invalid"}

    logger.warning(
        "Request validation failed",
        extra={"path": request.url.path, "error_count": len(fields), "first_field": first["field"]},
    )
    return _error_response(
        request,
        422,
        "VAL_REQUEST_INVALID",
        f"invalid request: {first['field']}: {first['message']}",
        details={"fields": fields},
    )


async def unhandled_exception_handler(
    request: Request,
    exc: Exception,
) -> JSONResponse:
    """Anything else is logged with its traceback and answered without internals."""
    logger.exception(
        "Unhandled exception",
        extra={"path": request.url.path, "exception_type": type(exc).__name__},
    )
    return _error_response(request, 500, "SYS_INTERNAL_ERROR", "An unexpected error occurred")


def register_exception_handlers(app: FastAPI) -> None:
    """Install the three handlers on an app."""
    app.add_exception_handler(ApplicationError, application_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
