"""
Update Handlers.

Per-kind handlers behind the backend link: one for chat messages, one for
callback presses, one for messages pushed through SendMessage. Each converts
the protocol shape to the domain, persists it through BotService and builds
the protocol response. Outbound delivery is the gateway's job, not theirs.
"""

from modules.backend.converters.to_domain import (
    to_callback_log,
    to_domain_message,
    to_domain_user,
    to_incoming_message,
)
from modules.backend.converters.to_protocol import to_outgoing_message, to_proto_response
from modules.backend.core.exceptions import (
    ApplicationError,
    DatabaseError,
    InvalidArgumentError,
)
from modules.backend.core.logging import get_logger
from modules.backend.core.utils import utc_now
from modules.backend.domain.models import Direction, DomainMessage, MessageStatus
from modules.backend.schemas import bot as proto
from modules.backend.services.bot import BotService
from modules.backend.services.replies import (
    CallbackCommand,
    generate_reply,
    reply_markup_for,
    resolve_callback_reply,
)

logger = get_logger(__name__)


class UpdateHandler:
    """
    Message and callback handlers.

    Usage:
        handler = UpdateHandler(BotService(session_factory))
        response = await handler.process_message(message)
    """

    def __init__(
        self,
        service: BotService,
        callback_commands: dict[str, CallbackCommand] | None = None,
    ) -> None:
        self.service = service
        self.callback_commands = callback_commands

    async def process_message(self, msg: proto.Message) -> proto.UpdateResponse:
        """
        Save the message, generate a reply, save the reply.

        Raises:
            DatabaseError: If either save fails. A failed reply save does not
                undo the incoming save.
        """
        try:
            await self.service.save_message(to_domain_message(msg))
        except ApplicationError as e:
            raise DatabaseError(f"failed to save incoming message: {e.message}") from e

        reply_text = generate_reply(msg.text, to_domain_user(msg.from_user))

        outgoing = DomainMessage(
            message_id=0,
            chat_id=msg.chat_id,
            user_id=msg.user_id,
            text=reply_text,
            direction=Direction.OUTGOING,
            status=MessageStatus.PENDING,
            timestamp=utc_now(),
        )
        try:
            await self.service.save_message(outgoing)
        except ApplicationError as e:
            raise DatabaseError(f"failed to save outgoing message: {e.message}") from e

        logger.info(
            "Message processed",
            extra={"chat_id": msg.chat_id, "message_id": msg.message_id},
        )
        return proto.UpdateResponse(
            success=True,
            messages=[to_outgoing_message(msg.chat_id, reply_text, reply_markup_for(msg.text))],
        )

    async def process_callback(self, cb: proto.CallbackQuery) -> proto.UpdateResponse:
        """
        Save the callback press and answer it from the command registry.

        Raises:
            DatabaseError: If the press could not be saved
        """
        try:
            await self.service.save_callback(to_callback_log(cb))
        except ApplicationError as e:
            raise DatabaseError(f"failed to save callback: {e.message}") from e

        reply_text = resolve_callback_reply(cb, self.callback_commands)

        logger.info(
            "Callback processed",
            extra={"callback_id": cb.id, "chat_id": cb.chat_id, "data": cb.data},
        )
        return proto.UpdateResponse(
            success=True,
            messages=[to_outgoing_message(cb.chat_id, reply_text)],
        )

    async def process_incoming_message(
        self,
        request: proto.SendMessageRequest | None,
    ) -> proto.SendMessageResponse:
        """
        Accept a message pushed through SendMessage.

        Raises:
            InvalidArgumentError: If the request is missing or has no chat id
        """
        if request is None:
            raise InvalidArgumentError("request must not be empty")
        if request.chat_id == 0:
            raise InvalidArgumentError("Chat ID must not be 0")

        response = await self.service.answer_incoming_message(to_incoming_message(request))
        return to_proto_response(response)
