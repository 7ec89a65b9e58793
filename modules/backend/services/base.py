"""
Base Service.

Base class for all services providing common patterns for business logic.
Services orchestrate repositories, own the unit of work and implement
business rules.

Every database operation runs in its own session taken from the factory
and is committed on success. Two operations therefore never share a
transaction: a failed save rolls back only itself.

Usage:
    from modules.backend.services.base import BaseService

    class MessageService(BaseService):
        async def save(self, message: DomainMessage) -> DomainMessage:
            return await self._execute_db_operation(
                "save_message",
                lambda session: MessageRepository(session).save(message),
            )
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any, TypeVar

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.backend.core.config import get_app_config
from modules.backend.core.exceptions import ConflictError, DatabaseError
from modules.backend.core.logging import get_logger

T = TypeVar("T")


class BaseService:
    """
    Base class for all services.

    Provides:
    - Unit-of-work session management
    - Logging context
    - Error wrapping for database operations
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        timeout_seconds: float | None = None,
    ) -> None:
        """
        Initialize the service with a session factory.

        Args:
            session_factory: Factory producing one AsyncSession per operation
            timeout_seconds: Limit for one unit of work. If None, read from
                timeouts.database in application.yaml.
        """
        self._session_factory = session_factory
        if timeout_seconds is None:
            timeout_seconds = get_app_config().application.timeouts.database
        self._timeout_seconds = timeout_seconds
        self._logger = get_logger(self.__class__.__module__)

    async def _execute_db_operation(
        self,
        operation: str,
        work: Callable[[AsyncSession], Awaitable[T]],
    ) -> T:
        """
        Run a database operation in its own session and commit it.

        Wraps SQLAlchemy exceptions into application-specific exceptions.

        Args:
            operation: Description of the operation for logging
            work: Coroutine function receiving the session

        Returns:
            Result of the operation

        Raises:
            ConflictError: For unique constraint violations
            DatabaseError: For other database errors, an unreachable
                database or an operation exceeding the time limit
        """
        try:
            async with asyncio.timeout(self._timeout_seconds):
                async with self._session_factory() as session:
                    result = await work(session)
                    await session.commit()
                    return result
        except IntegrityError as e:
            self._logger.warning(
                "Database integrity error",
                extra={"operation": operation, "error": str(e)},
            )
            error_str = str(e).lower()
            if "unique" in error_str or "duplicate" in error_str:
                raise ConflictError("Resource already exists") from e
            raise DatabaseError(f"Database constraint violation: {operation}") from e
        except SQLAlchemyError as e:
            self._logger.error(
                "Database error",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database operation failed: {operation}") from e
        except TimeoutError as e:
            self._logger.error(
                "Database operation timed out",
                extra={"operation": operation, "timeout_seconds": self._timeout_seconds},
            )
            raise DatabaseError(f"Database operation timed out: {operation}") from e
        except OSError as e:
            # Drivers raise connection failures before SQLAlchemy can wrap them
            self._logger.error(
                "Database unreachable",
                extra={"operation": operation, "error": str(e)},
            )
            raise DatabaseError(f"Database unreachable: {operation}: {e}") from e

    def _log_operation(
        self,
        operation: str,
        **context: Any,
    ) -> None:
        """
        Log a service operation with context.

        Args:
            operation: Description of the operation
            **context: Additional context to include in log
        """
        self._logger.info(
            operation,
            extra={"service": self.__class__.__name__, **context},
        )

    def _log_debug(
        self,
        message: str,
        **context: Any,
    ) -> None:
        """
        Log debug information.

        Args:
            message: Debug message
            **context: Additional context to include in log
        """
        self._logger.debug(
            message,
            extra={"service": self.__class__.__name__, **context},
        )
