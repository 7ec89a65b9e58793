"""
Domain → Protocol Converters.

Pure mapping functions from domain types back onto the backend link schemas.
"""

from modules.backend.domain.markup import MarkupKind, ReplyMarkup
from modules.backend.domain.models import DomainUser, MessageResponse
from modules.backend.schemas import bot as proto


def to_proto_user(user: DomainUser | None) -> proto.User | None:
    if user is None:
        return None
    return proto.User(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        username=user.username,
    )


def to_proto_markup(markup: ReplyMarkup | None) -> proto.ReplyMarkup | None:
    """
    Map the domain variant onto the protocol one-of.

    Returns None for an absent or empty markup, never an empty one-of.
    """
    if markup is None:
        return None

    if markup.kind is MarkupKind.INLINE:
        return proto.ReplyMarkup(
            inline_keyboard=proto.InlineKeyboard(
                rows=[
                    [
                        proto.InlineKeyboardButton(
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

    if markup.kind is MarkupKind.PLAIN:
        keyboard = markup.keyboard
        return proto.ReplyMarkup(
            reply_keyboard=proto.ReplyKeyboard(
                rows=[[proto.KeyboardButton(text=b.text) for b in row] for row in keyboard.rows],
                resize_keyboard=keyboard.resize,
                one_time_keyboard=keyboard.one_time,
            )
        )

    return None


def to_outgoing_message(
    chat_id: int,
    text: str,
    markup: ReplyMarkup | None = None,
) -> proto.OutgoingMessage:
    return proto.OutgoingMessage(
        chat_id=chat_id,
        text=text,
        reply_markup=to_proto_markup(markup),
    )


def to_proto_response(response: MessageResponse | None) -> proto.SendMessageResponse:
    """Map a service result; a missing result is reported as a failure."""
    if response is None:
        return proto.SendMessageResponse(success=False, error="empty response")
    return proto.SendMessageResponse(success=response.success, error=response.error)
