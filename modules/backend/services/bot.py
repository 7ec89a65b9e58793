"""
Bot Service.

Business logic layer for the bot: persists incoming and outgoing messages
and callback presses, and acknowledges messages pushed through SendMessage.
"""

from modules.backend.domain.models import (
    CallbackLog,
    DomainMessage,
    IncomingMessage,
    MessageResponse,
)
from modules.backend.repositories.callback_log import CallbackLogRepository
from modules.backend.repositories.message import MessageRepository
from modules.backend.services.base import BaseService


class BotService(BaseService):
    """
    Service for bot persistence.

    Each save is its own unit of work. There are no compensating
    transactions: a reply that fails to save leaves the already saved
    incoming message in place.
    """

    async def save_message(self, message: DomainMessage) -> DomainMessage:
        """
        Persist a chat message of either direction.

        Raises:
            DatabaseError: If the message could not be stored
        """
        saved = await self._execute_db_operation(
            f"save_{message.direction.value}_message",
            lambda session: MessageRepository(session).save(message),
        )
        self._log_debug(
            "Message saved",
            message_id=saved.id,
            chat_id=saved.chat_id,
            direction=saved.direction.value,
        )
        return saved

    async def save_callback(self, log: CallbackLog) -> CallbackLog:
        """
        Persist a callback press.

        Raises:
            DatabaseError: If the log could not be stored
        """
        saved = await self._execute_db_operation(
            "save_callback",
            lambda session: CallbackLogRepository(session).save(log),
        )
        self._log_debug("Callback saved", callback_id=saved.callback_id, data=saved.data)
        return saved

    async def answer_incoming_message(self, incoming: IncomingMessage) -> MessageResponse:
        """Acknowledge a message pushed through the SendMessage call."""
        self._log_operation(
            "Incoming message accepted",
            chat_id=incoming.chat_id,
            text_length=len(incoming.text),
            markup=incoming.reply_markup.kind.value,
        )
        return MessageResponse(success=True)
