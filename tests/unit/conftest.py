"""
Unit Test Fixtures.

Fixtures for unit tests - external dependencies are mocked.
Unit tests should be fast and isolated. The only database they touch is
the throwaway SQLite file from the root conftest.
"""

import dataclasses
from unittest.mock import AsyncMock, MagicMock

import pytest

from modules.backend.domain.models import MessageResponse
from modules.backend.schemas import bot as proto
from modules.backend.services.bot import BotService


# =============================================================================
# Protocol Builders
# =============================================================================


@pytest.fixture
def make_message():
    """
    Build a protocol Message with sensible defaults.

    Usage:
        def test_reply(make_message):
            msg = make_message(text="/start")
    """

    def _make(
        text: str = "hi",
        chat_id: int = 42,
        user_id: int = 9,
        message_id: int = 100,
        date: int = 1700000000,
        first_name: str = "Ann",
    ) -> proto.Message:
        sender = proto.User(id=user_id, first_name=first_name) if user_id else None
        return proto.Message(
            message_id=message_id,
            chat_id=chat_id,
            user_id=user_id,
            text=text,
            date=date,
            from_user=sender,
        )

    return _make


@pytest.fixture
def make_callback():
    """Build a protocol CallbackQuery with sensible defaults."""

    def _make(
        data: str = "help",
        callback_id: str = "c1",
        chat_id: int = 42,
        user_id: int = 9,
        message_id: int = 5,
    ) -> proto.CallbackQuery:
        return proto.CallbackQuery(
            id=callback_id,
            user_id=user_id,
            chat_id=chat_id,
            message_id=message_id,
            data=data,
        )

    return _make


# =============================================================================
# Service Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_bot_service() -> AsyncMock:
    """
    Mock BotService whose saves echo the input back with an id assigned.

    Usage:
        async def test_save_failure(mock_bot_service):
            mock_bot_service.save_message.side_effect = DatabaseError("down")
    """

    async def _assign_id(item):
        return dataclasses.replace(item, id="generated-id")

    service = AsyncMock(spec=BotService)
    service.save_message = AsyncMock(side_effect=_assign_id)
    service.save_callback = AsyncMock(side_effect=_assign_id)
    service.answer_incoming_message = AsyncMock(return_value=MessageResponse(success=True))
    return service


# =============================================================================
# Telegram Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_bot() -> AsyncMock:
    """
    Mock aiogram Bot.

    send_message returns a message with message_id 777; set_webhook returns True.
    """
    sent = MagicMock()
    sent.message_id = 777

    bot = AsyncMock()
    bot.send_message = AsyncMock(return_value=sent)
    bot.set_webhook = AsyncMock(return_value=True)
    return bot


# =============================================================================
# Logging Mock Fixtures
# =============================================================================


@pytest.fixture
def mock_logger() -> MagicMock:
    """
    Mock logger for testing logging calls.

    Usage:
        def test_logging(mock_logger):
            with patch("module.logger", mock_logger):
                # Test code that logs
                mock_logger.info.assert_called_once()
    """
    logger = MagicMock()
    logger.debug = MagicMock()
    logger.info = MagicMock()
    logger.warning = MagicMock()
    logger.error = MagicMock()
    logger.exception = MagicMock()
    return logger
