"""
Custom Exceptions.

Application-specific exception classes for consistent error handling.
The error code travels over the backend link, so the gateway can rebuild
the same exception type from an error response.
"""


class ApplicationError(Exception):
    """Base exception for all application errors."""

    def __init__(self, message: str, code: str = "SYS_INTERNAL_ERROR") -> None:
        self.message = message
        self.code = code
        super().__init__(self.message)


class NotFoundError(ApplicationError):
    """Raised when a resource cannot be found."""

    def __init__(self, message: str = "Resource not found") -> None:
        super().__init__(message, code="RES_NOT_FOUND")


class InvalidArgumentError(ApplicationError):
    """
    Raised when a request carries nothing routable or an invalid field.

    Terminal client error: never retried.
    """

    def __init__(self, message: str = "Invalid argument") -> None:
        super().__init__(message, code="VAL_INVALID_ARGUMENT")


class ConflictError(ApplicationError):
    """Raised when there is a state conflict."""

    def __init__(self, message: str = "Resource conflict") -> None:
        super().__init__(message, code="RES_CONFLICT")


class ExternalServiceError(ApplicationError):
    """Raised when an external service call fails."""

    def __init__(self, message: str = "External service error") -> None:
        super().__init__(message, code="SYS_EXTERNAL_SERVICE_ERROR")


class DatabaseError(ApplicationError):
    """Raised when a database operation fails."""

    def __init__(self, message: str = "Database error") -> None:
        super().__init__(message, code="SYS_DATABASE_ERROR")


ERROR_CODE_MAP: dict[str, type[ApplicationError]] = {
    "RES_NOT_FOUND": NotFoundError,
    "VAL_INVALID_ARGUMENT": InvalidArgumentError,
    "VAL_REQUEST_INVALID": InvalidArgumentError,
    "RES_CONFLICT": ConflictError,
    "SYS_EXTERNAL_SERVICE_ERROR": ExternalServiceError,
    "SYS_DATABASE_ERROR": DatabaseError,
}


def error_from_code(code: str, message: str) -> ApplicationError:
    """Rebuild an application exception from an error code and message."""
    error_cls = ERROR_CODE_MAP.get(code)
    if error_cls is None:
        return ApplicationError(message, code=code)
    return error_cls(message)
