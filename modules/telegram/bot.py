"""
Bot Configuration.

Creates the aiogram Bot the gateway uses for outbound delivery and webhook
registration. The gateway does not run an aiogram Dispatcher: updates are
relayed to the backend instead of being handled in-process.
Uses lazy initialization to prevent import-time failures.
"""

from typing import TYPE_CHECKING

from modules.backend.core.logging import get_logger

if TYPE_CHECKING:
    from aiogram import Bot

logger = get_logger(__name__)

# Module-level state for lazy initialization
_bot: "Bot | None" = None


def create_bot() -> "Bot":
    """
    Create the aiogram Bot instance.

    Messages are sent as plain text; user text echoed back must not be
    interpreted as HTML.

    Raises:
        RuntimeError: If TELEGRAM_BOT_TOKEN is not configured
    """
    from aiogram import Bot

    from modules.backend.core.config import get_settings

    settings = get_settings()

    if not settings.telegram_bot_token:
        raise RuntimeError(
            "TELEGRAM_BOT_TOKEN not configured. "
            "Set TELEGRAM_BOT_TOKEN environment variable or configure it in config/.env"
        )

    bot = Bot(token=settings.telegram_bot_token)
    logger.info("Telegram bot created")
    return bot


def get_bot() -> "Bot":
    """Get or create the Bot instance (lazy initialization)."""
    global _bot
    if _bot is None:
        _bot = create_bot()
    return _bot


async def close_bot() -> None:
    """Close the bot's HTTP session if one was created."""
    global _bot
    if _bot is not None:
        await _bot.session.close()
        logger.info("Bot session closed")
    _bot = None
