"""
Delivery Service.

Outbound delivery of the backend's outgoing messages through the Telegram
Bot API (aiogram Bot). Delivery is best effort: failures are logged and
reported in the result, never raised, and never retried, so the origin
does not end up with a duplicate reply.

Usage:
    service = DeliveryService(bot)
    result = await service.deliver(response.messages)
    if not result.success:
        ...
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any

from aiogram.types import InlineKeyboardMarkup, ReplyKeyboardMarkup

from modules.backend.converters.to_domain import to_domain_markup
from modules.backend.core.logging import get_logger, log_with_source
from modules.backend.core.utils import utc_now
from modules.backend.domain.markup import ReplyMarkup
from modules.backend.schemas.bot import OutgoingMessage
from modules.telegram.markup import to_wire

if TYPE_CHECKING:
    from aiogram import Bot

logger = get_logger(__name__)


@dataclass
class DeliveryResult:
    """Result of one send attempt."""

    success: bool
    chat_id: int
    message_id: int | None = None
    error: str | None = None
    timestamp: datetime = field(default_factory=utc_now)


@dataclass
class BatchDeliveryResult:
    """Results of an in-order batch; stops at the first failure."""

    results: list[DeliveryResult] = field(default_factory=list)
    skipped: int = 0

    @property
    def success(self) -> bool:
        return all(r.success for r in self.results) and self.skipped == 0


def to_aiogram_markup(
    wire: dict[str, Any] | None,
) -> InlineKeyboardMarkup | ReplyKeyboardMarkup | None:
    """Build the aiogram markup object for a Telegram wire markup."""
    if wire is None:
        return None
    if "inline_keyboard" in wire:
        return InlineKeyboardMarkup.model_validate(wire)
    return ReplyKeyboardMarkup.model_validate(wire)


class DeliveryService:
    """
    Sends messages to Telegram chats.

    The Bot is resolved lazily so the service can be built before a token
    is configured.
    """

    def __init__(self, bot: "Bot | None" = None) -> None:
        self._bot = bot

    @property
    def bot(self) -> "Bot":
        if self._bot is None:
            from modules.telegram.bot import get_bot

            self._bot = get_bot()
        return self._bot

    async def send_message(
        self,
        chat_id: int,
        text: str,
        markup: ReplyMarkup | None = None,
    ) -> DeliveryResult:
        """
        Send one message.

        Args:
            chat_id: Telegram chat ID
            text: Message text, sent as plain text
            markup: Optional keyboard

        Returns:
            DeliveryResult with success status
        """
        try:
            message = await self.bot.send_message(
                chat_id=chat_id,
                text=text,
                reply_markup=to_aiogram_markup(to_wire(markup)),
            )
        except Exception as e:
            log_with_source(
                logger,
                "telegram",
                "error",
                "Failed to deliver message",
                chat_id=chat_id,
                error=str(e),
            )
            return DeliveryResult(success=False, chat_id=chat_id, error=str(e))

        log_with_source(
            logger,
            "telegram",
            "info",
            "Message delivered",
            chat_id=chat_id,
            message_id=message.message_id,
        )
        return DeliveryResult(success=True, chat_id=chat_id, message_id=message.message_id)

    async def deliver(self, messages: list[OutgoingMessage]) -> BatchDeliveryResult:
        """Send messages in order, stopping at the first failure."""
        batch = BatchDeliveryResult()

        for index, outgoing in enumerate(messages):
            result = await self.send_message(
                chat_id=outgoing.chat_id,
                text=outgoing.text,
                markup=to_domain_markup(outgoing.reply_markup),
            )
            batch.results.append(result)
            if not result.success:
                batch.skipped = len(messages) - index - 1
                break

        return batch

    async def set_webhook(
        self,
        url: str,
        secret_token: str | None = None,
        drop_pending_updates: bool = False,
    ) -> bool:
        """
        Register the webhook URL with Telegram.

        Raises:
            aiogram.exceptions.TelegramAPIError: If Telegram rejects the URL
        """
        result = await self.bot.set_webhook(
            url=url,
            secret_token=secret_token or None,
            drop_pending_updates=drop_pending_updates,
            allowed_updates=["message", "callback_query"],
        )
        log_with_source(logger, "telegram", "info", "Webhook configured", webhook_url=url)
        return result
