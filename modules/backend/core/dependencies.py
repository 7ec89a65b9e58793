"""
FastAPI Dependencies.

Shared dependencies for request handling. Tests override
get_session_factory (or get_update_router) through app.dependency_overrides.
"""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.backend.core.config import get_app_config
from modules.backend.core.database import get_session_factory
from modules.backend.services.bot import BotService
from modules.backend.services.update_handler import UpdateHandler
from modules.backend.services.update_router import RoutingStrategy, UpdateRouter

SessionFactory = Annotated[async_sessionmaker[AsyncSession], Depends(get_session_factory)]


async def get_request_id(request: Request) -> str | None:
    """Request ID set by RequestContextMiddleware."""
    return getattr(request.state, "request_id", None) or request.headers.get("X-Request-ID")


RequestId = Annotated[str | None, Depends(get_request_id)]


def get_bot_service(session_factory: SessionFactory) -> BotService:
    return BotService(session_factory)


def get_update_handler(
    service: Annotated[BotService, Depends(get_bot_service)],
) -> UpdateHandler:
    return UpdateHandler(service)


def get_update_router(
    handler: Annotated[UpdateHandler, Depends(get_update_handler)],
) -> UpdateRouter:
    """Router configured from application.yaml routing settings."""
    routing = get_app_config().application.routing
    return UpdateRouter(
        handler,
        strategy=RoutingStrategy(routing.strategy),
        concurrent_branches=routing.concurrent_branches,
    )


UpdateHandlerDep = Annotated[UpdateHandler, Depends(get_update_handler)]
UpdateRouterDep = Annotated[UpdateRouter, Depends(get_update_router)]
