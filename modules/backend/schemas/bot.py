"""
Bot Protocol Schemas.

Pydantic schemas for the backend link between the bot gateway and the
backend service (ProcessUpdate and SendMessage). These are the wire shapes;
the domain shapes live in modules.backend.domain.
"""

from pydantic import BaseModel, ConfigDict, Field, model_validator


class User(BaseModel):
    """Sender identity as reported by Telegram."""

    id: int
    first_name: str = ""
    last_name: str = ""
    username: str = ""


class Message(BaseModel):
    """Inbound chat message."""

    message_id: int
    chat_id: int
    user_id: int
    text: str = ""
    date: int = Field(default=0, description="Send time, epoch seconds")
    from_user: User | None = Field(default=None, alias="from")

    model_config = ConfigDict(populate_by_name=True)


class CallbackQuery(BaseModel):
    """Inline keyboard button press."""

    id: str
    user_id: int
    chat_id: int
    message_id: int = Field(description="Message the keyboard was attached to")
    data: str = ""


class InlineKeyboardButton(BaseModel):
    text: str
    callback_data: str = ""
    url: str = ""


class InlineKeyboard(BaseModel):
    rows: list[list[InlineKeyboardButton]] = Field(default_factory=list)


class KeyboardButton(BaseModel):
    text: str


class ReplyKeyboard(BaseModel):
    rows: list[list[KeyboardButton]] = Field(default_factory=list)
    resize_keyboard: bool = False
    one_time_keyboard: bool = False


class ReplyMarkup(BaseModel):
    """One-of: inline_keyboard or reply_keyboard. Neither means no keyboard."""

    inline_keyboard: InlineKeyboard | None = None
    reply_keyboard: ReplyKeyboard | None = None

    @model_validator(mode="after")
    def _one_keyboard_kind(self) -> "ReplyMarkup":
        if self.inline_keyboard is not None and self.reply_keyboard is not None:
            raise ValueError("only one of inline_keyboard or reply_keyboard may be set")
        return self


class OutgoingMessage(BaseModel):
    chat_id: int
    text: str
    reply_markup: ReplyMarkup | None = None


class UpdateRequest(BaseModel):
    """
    One inbound unit of work.

    Carries a message, a callback query, or (depending on the routing
    strategy) both. An envelope with neither is rejected by the router.
    """

    update_id: int = 0
    message: Message | None = None
    callback_query: CallbackQuery | None = None


class UpdateResponse(BaseModel):
    """Result of one handler, or of the router after aggregation."""

    success: bool
    error: str | None = None
    messages: list[OutgoingMessage] = Field(default_factory=list)


class SendMessageRequest(BaseModel):
    chat_id: int
    text: str = ""
    reply_markup: ReplyMarkup | None = None


class SendMessageResponse(BaseModel):
    success: bool
    error: str | None = None
