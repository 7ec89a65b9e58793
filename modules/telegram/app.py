"""
Bot Gateway Application.

FastAPI application that receives Telegram webhooks and relays them to the
backend service. Runs as its own process next to the backend.

    uvicorn modules.telegram.app:app --port 8080
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI

from modules.backend.core.config import get_app_config, get_settings, get_webhook_url
from modules.backend.core.logging import get_logger, setup_logging
from modules.backend.core.middleware import RequestContextMiddleware
from modules.telegram.bot import close_bot
from modules.telegram.services.backend_client import BackendClient
from modules.telegram.services.delivery import DeliveryService
from modules.telegram.webhook import get_webhook_router

logger = get_logger(__name__)

_app: FastAPI | None = None


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Register the webhook on startup when configured; close clients on shutdown."""
    setup_logging()
    webhook_config = get_app_config().gateway.webhook

    webhook_url = get_webhook_url()
    if webhook_config.set_on_startup and webhook_url:
        await app.state.delivery.set_webhook(
            webhook_url,
            secret_token=get_settings().telegram_webhook_secret,
            drop_pending_updates=webhook_config.drop_pending_updates,
        )

    logger.info(
        "Gateway starting",
        extra={
            "webhook_path": webhook_config.path,
            "backend_url": app.state.backend.base_url,
        },
    )
    yield
    await app.state.backend.close()
    await close_bot()
    logger.info("Gateway shutting down")


def create_gateway_app(
    backend: BackendClient | None = None,
    delivery: DeliveryService | None = None,
    webhook_secret: str | None = None,
) -> FastAPI:
    """
    Create the gateway application.

    Args:
        backend: Backend link client. Built from gateway.yaml if None.
        delivery: Outbound delivery service. Uses the shared Bot if None.
        webhook_secret: Overrides TELEGRAM_WEBHOOK_SECRET (empty disables the check).
    """
    backend = backend or BackendClient()
    delivery = delivery or DeliveryService()

    app = FastAPI(
        title="telegram-relay gateway",
        docs_url=None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.backend = backend
    app.state.delivery = delivery

    app.add_middleware(RequestContextMiddleware, service="gateway")
    app.include_router(get_webhook_router(backend, delivery, webhook_secret=webhook_secret))

    @app.get("/health", tags=["health"])
    async def health_check() -> dict[str, str]:
        """Liveness check."""
        return {"status": "healthy"}

    return app


def get_app() -> FastAPI:
    """Get the gateway application instance (lazy initialization)."""
    global _app
    if _app is None:
        _app = create_gateway_app()
    return _app


# For uvicorn: `uvicorn modules.telegram.app:app`
def __getattr__(name: str) -> FastAPI:
    """Support lazy access to `app` for uvicorn compatibility."""
    if name == "app":
        return get_app()
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
