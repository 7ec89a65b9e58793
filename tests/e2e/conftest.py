"""
End-to-End Test Fixtures.

Fixtures for E2E tests - the gateway relays webhook updates to the real
backend over an in-process ASGI transport. Only the Telegram Bot API is
mocked.
"""

from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from modules.backend.core.database import get_session_factory
from modules.telegram.services.backend_client import BackendClient
from modules.telegram.services.delivery import DeliveryService


@pytest.fixture
def telegram_bot() -> AsyncMock:
    """Mock aiogram Bot recording every outbound send_message."""
    sent = MagicMock()
    sent.message_id = 900

    bot = AsyncMock()
    bot.send_message = AsyncMock(return_value=sent)
    return bot


@pytest.fixture
async def backend_client(
    db_session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[BackendClient, None]:
    """Backend link client talking to the backend app in-process."""
    from modules.backend.main import create_app

    backend_app = create_app()
    backend_app.dependency_overrides[get_session_factory] = lambda: db_session_factory

    client = BackendClient(
        base_url="http://backend",
        http_client=AsyncClient(
            transport=ASGITransport(app=backend_app),
            base_url="http://backend",
            headers={"X-Caller-ID": "gateway"},
        ),
    )
    yield client
    await client.close()


@pytest.fixture
async def e2e_client(
    backend_client: BackendClient,
    telegram_bot: AsyncMock,
) -> AsyncGenerator[AsyncClient, None]:
    """Client for the gateway webhook, wired to the real backend."""
    from modules.telegram.app import create_gateway_app

    app = create_gateway_app(
        backend=backend_client,
        delivery=DeliveryService(telegram_bot),
        webhook_secret="",
    )
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://gateway",
    ) as client:
        yield client
