"""
Telegram Webhook Schemas.

Subset of the Telegram Bot API Update payload that the gateway relays, and
its conversion into the backend link's UpdateRequest envelope. Unknown
fields are ignored; update kinds other than message and callback_query
arrive as an envelope with neither branch set.
"""

from pydantic import BaseModel, ConfigDict, Field

from modules.backend.schemas import bot as proto


class _TelegramModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class TelegramUser(_TelegramModel):
    id: int
    is_bot: bool = False
    first_name: str | None = None
    last_name: str | None = None
    username: str | None = None

    def to_proto(self) -> proto.User:
        return proto.User(
            id=self.id,
            first_name=self.first_name or "",
            last_name=self.last_name or "",
            username=self.username or "",
        )


class TelegramChat(_TelegramModel):
    id: int
    type: str | None = None


class TelegramMessage(_TelegramModel):
    message_id: int
    from_user: TelegramUser | None = Field(default=None, alias="from")
    chat: TelegramChat
    date: int = 0
    text: str | None = None


class TelegramCallbackMessage(_TelegramModel):
    """Message the pressed inline keyboard was attached to."""

    message_id: int
    chat: TelegramChat


class TelegramCallbackQuery(_TelegramModel):
    id: str
    from_user: TelegramUser = Field(alias="from")
    message: TelegramCallbackMessage | None = None
    data: str | None = None


class TelegramUpdate(_TelegramModel):
    """Top-level Telegram update."""

    update_id: int
    message: TelegramMessage | None = None
    callback_query: TelegramCallbackQuery | None = None

    def to_update_request(self) -> proto.UpdateRequest:
        """Build the backend link envelope: from.id → user_id, chat.id → chat_id."""
        message = None
        if self.message is not None:
            msg = self.message
            message = proto.Message(
                message_id=msg.message_id,
                chat_id=msg.chat.id,
                user_id=msg.from_user.id if msg.from_user else 0,
                text=msg.text or "",
                date=msg.date,
                from_user=msg.from_user.to_proto() if msg.from_user else None,
            )

        callback = None
        if self.callback_query is not None:
            cb = self.callback_query
            callback = proto.CallbackQuery(
                id=cb.id,
                user_id=cb.from_user.id,
                chat_id=cb.message.chat.id if cb.message else 0,
                message_id=cb.message.message_id if cb.message else 0,
                data=cb.data or "",
            )

        return proto.UpdateRequest(
            update_id=self.update_id,
            message=message,
            callback_query=callback,
        )
