"""
Protocol → Domain Converters.

Pure mapping functions from the backend link schemas onto domain types.
No state, no I/O.
"""

from datetime import datetime, timezone

from modules.backend.core.utils import utc_now
from modules.backend.domain.markup import (
    InlineButton,
    InlineKeyboard,
    Keyboard,
    KeyboardButton,
    ReplyMarkup,
)
from modules.backend.domain.models import (
    CallbackLog,
    DomainMessage,
    DomainUser,
    Direction,
    IncomingMessage,
    MessageStatus,
)
from modules.backend.schemas import bot as proto


def from_epoch(seconds: int) -> datetime:
    """Epoch seconds to a timezone-naive UTC datetime."""
    return datetime.fromtimestamp(seconds, tz=timezone.utc).replace(tzinfo=None)


def to_domain_user(user: proto.User | None) -> DomainUser | None:
    if user is None:
        return None
    return DomainUser(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        username=user.username,
    )


def to_domain_message(
    msg: proto.Message,
    direction: Direction = Direction.INCOMING,
    status: MessageStatus = MessageStatus.RECEIVED,
) -> DomainMessage:
    """Map an inbound message; the store assigns the identity on save."""
    return DomainMessage(
        message_id=msg.message_id,
        chat_id=msg.chat_id,
        user_id=msg.user_id,
        text=msg.text,
        direction=direction,
        status=status,
        timestamp=from_epoch(msg.date),
    )


def to_callback_log(cb: proto.CallbackQuery) -> CallbackLog:
    """Map a callback query, capturing the time it was logged."""
    return CallbackLog(
        callback_id=cb.id,
        user_id=cb.user_id,
        chat_id=cb.chat_id,
        message_id=cb.message_id,
        data=cb.data,
        timestamp=utc_now(),
    )


def to_domain_markup(markup: proto.ReplyMarkup | None) -> ReplyMarkup:
    """
    Map the protocol one-of onto the domain variant.

    An absent markup, or one with neither keyboard set, maps to no keyboard.
    """
    if markup is None:
        return ReplyMarkup.none()

    if markup.inline_keyboard is not None:
        return ReplyMarkup(
            inline_keyboard=InlineKeyboard(
                rows=[
                    [
                        InlineButton(
                            text=button.text,
                            callback_data=button.callback_data,
                            url=button.url,
                        )
                        for button in row
                    ]
                    for row in markup.inline_keyboard.rows
                ]
            )
        )

    if markup.reply_keyboard is not None:
        keyboard = markup.reply_keyboard
        return ReplyMarkup(
            keyboard=Keyboard(
                rows=[[KeyboardButton(text=b.text) for b in row] for row in keyboard.rows],
                resize=keyboard.resize_keyboard,
                one_time=keyboard.one_time_keyboard,
            )
        )

    return ReplyMarkup.none()


def to_incoming_message(request: proto.SendMessageRequest) -> IncomingMessage:
    return IncomingMessage(
        chat_id=request.chat_id,
        text=request.text,
        received_at=utc_now(),
        reply_markup=to_domain_markup(request.reply_markup),
    )
