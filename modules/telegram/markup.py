"""
Reply-Markup Codec.

Converts the domain ReplyMarkup into the JSON shape Telegram's sendMessage
expects, and back again for persistence and logging:

    inline → {"inline_keyboard": [[{"text", "callback_data"?, "url"?}]]}
    plain  → {"keyboard": [[{"text"}]], "resize_keyboard", "one_time_keyboard"}
    none   → None

Usage:
    wire = to_wire(markup)
    markup = from_wire(wire)
"""

from typing import Any

from modules.backend.domain.markup import (
    InlineButton,
    InlineKeyboard,
    Keyboard,
    KeyboardButton,
    MarkupKind,
    ReplyMarkup,
)


def _inline_button_to_wire(button: InlineButton) -> dict[str, Any]:
    wire: dict[str, Any] = {"text": button.text}
    if button.callback_data:
        wire["callback_data"] = button.callback_data
    if button.url:
        wire["url"] = button.url
    return wire


def to_wire(markup: ReplyMarkup | None) -> dict[str, Any] | None:
    """
    Encode a markup for Telegram.

    Returns None, not an empty structure, when there is no keyboard.
    """
    if markup is None:
        return None

    if markup.kind is MarkupKind.INLINE:
        return {
            "inline_keyboard": [
                [_inline_button_to_wire(button) for button in row]
                for row in markup.inline_keyboard.rows
            ]
        }

    if markup.kind is MarkupKind.PLAIN:
        keyboard = markup.keyboard
        return {
            "keyboard": [[{"text": button.text} for button in row] for row in keyboard.rows],
            "resize_keyboard": keyboard.resize,
            "one_time_keyboard": keyboard.one_time,
        }

    return None


def from_wire(wire: dict[str, Any] | None) -> ReplyMarkup:
    """Decode a Telegram markup; anything unrecognized decodes to no keyboard."""
    if not wire:
        return ReplyMarkup.none()

    if "inline_keyboard" in wire:
        return ReplyMarkup(
            inline_keyboard=InlineKeyboard(
                rows=[
                    [
                        InlineButton(
                            text=button.get("text", ""),
                            callback_data=button.get("callback_data") or "",
                            url=button.get("url") or "",
                        )
                        for button in row
                    ]
                    for row in wire["inline_keyboard"] or []
                ]
            )
        )

    if "keyboard" in wire:
        return ReplyMarkup(
            keyboard=Keyboard(
                rows=[
                    [KeyboardButton(text=_button_text(button)) for button in row]
                    for row in wire["keyboard"] or []
                ],
                resize=bool(wire.get("resize_keyboard", False)),
                one_time=bool(wire.get("one_time_keyboard", False)),
            )
        )

    return ReplyMarkup.none()


def _button_text(button: dict[str, Any] | str) -> str:
    # Telegram accepts bare strings as reply keyboard buttons
    if isinstance(button, str):
        return button
    return button.get("text", "")
