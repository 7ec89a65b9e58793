"""
Reply Markup Domain Types.

A keyboard attached to an outgoing message is one of three things: an inline
keyboard (buttons attached to the message itself), a plain reply keyboard
(replaces the user's input field) or nothing. ReplyMarkup models this as a
tagged variant; it refuses to hold both keyboard kinds at once.

Usage:
    markup = ReplyMarkup.inline([[InlineButton("Help", callback_data="help")]])
    markup = ReplyMarkup.plain([["Yes", "No"]], resize=True)
    markup = ReplyMarkup.none()
"""

from dataclasses import dataclass, field
from enum import Enum


class MarkupKind(str, Enum):
    """Which arm of the reply markup variant is populated."""

    INLINE = "inline"
    PLAIN = "plain"
    NONE = "none"


@dataclass(frozen=True)
class InlineButton:
    """
    Inline keyboard button.

    Normally carries one of callback_data or url. Both are kept as given
    when a caller supplies both.
    """

    text: str
    callback_data: str = ""
    url: str = ""


@dataclass(frozen=True)
class InlineKeyboard:
    rows: list[list[InlineButton]] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not any(self.rows)


@dataclass(frozen=True)
class KeyboardButton:
    text: str


@dataclass(frozen=True)
class Keyboard:
    """Plain reply keyboard with Telegram's resize and one-time flags."""

    rows: list[list[KeyboardButton]] = field(default_factory=list)
    resize: bool = False
    one_time: bool = False

    def is_empty(self) -> bool:
        return not any(self.rows)


@dataclass(frozen=True)
class ReplyMarkup:
    """
    Tagged variant over {Inline, Plain, None}.

    Raises:
        ValueError: If both an inline and a plain keyboard are given
    """

    inline_keyboard: InlineKeyboard | None = None
    keyboard: Keyboard | None = None

    def __post_init__(self) -> None:
        if self.inline_keyboard is not None and self.keyboard is not None:
            raise ValueError("reply markup cannot hold both an inline and a plain keyboard")

    @property
    def kind(self) -> MarkupKind:
        if self.inline_keyboard is not None and not self.inline_keyboard.is_empty():
            return MarkupKind.INLINE
        if self.keyboard is not None and not self.keyboard.is_empty():
            return MarkupKind.PLAIN
        return MarkupKind.NONE

    def is_empty(self) -> bool:
        """A markup with no populated keyboard means "no keyboard"."""
        return self.kind is MarkupKind.NONE

    @classmethod
    def inline(cls, rows: list[list[InlineButton]]) -> "ReplyMarkup":
        return cls(inline_keyboard=InlineKeyboard(rows=[list(row) for row in rows]))

    @classmethod
    def plain(
        cls,
        rows: list[list[str]],
        resize: bool = False,
        one_time: bool = False,
    ) -> "ReplyMarkup":
        return cls(
            keyboard=Keyboard(
                rows=[[KeyboardButton(text) for text in row] for row in rows],
                resize=resize,
                one_time=one_time,
            )
        )

    @classmethod
    def none(cls) -> "ReplyMarkup":
        return cls()
