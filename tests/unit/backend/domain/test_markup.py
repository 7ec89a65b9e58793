"""Unit tests for modules.backend.domain.markup."""

import pytest

from modules.backend.domain.markup import (
    InlineButton,
    InlineKeyboard,
    Keyboard,
    KeyboardButton,
    MarkupKind,
    ReplyMarkup,
)


class TestReplyMarkupVariant:
    def test_none(self):
        markup = ReplyMarkup.none()

        assert markup.kind is MarkupKind.NONE
        assert markup.is_empty()

    def test_inline(self):
        markup = ReplyMarkup.inline([[InlineButton("Help", callback_data="help")]])

        assert markup.kind is MarkupKind.INLINE
        assert markup.keyboard is None
        assert not markup.is_empty()

    def test_plain(self):
        markup = ReplyMarkup.plain([["Yes", "No"]], resize=True, one_time=True)

        assert markup.kind is MarkupKind.PLAIN
        assert markup.inline_keyboard is None
        assert markup.keyboard.rows == [[KeyboardButton("Yes"), KeyboardButton("No")]]
        assert markup.keyboard.resize is True
        assert markup.keyboard.one_time is True

    def test_both_keyboards_rejected(self):
        with pytest.raises(ValueError, match="both"):
            ReplyMarkup(
                inline_keyboard=InlineKeyboard(rows=[[InlineButton("a", callback_data="a")]]),
                keyboard=Keyboard(rows=[[KeyboardButton("b")]]),
            )

    @pytest.mark.parametrize(
        "markup",
        [
            ReplyMarkup(inline_keyboard=InlineKeyboard()),
            ReplyMarkup(inline_keyboard=InlineKeyboard(rows=[[]])),
            ReplyMarkup(keyboard=Keyboard()),
            ReplyMarkup(keyboard=Keyboard(rows=[[], []])),
        ],
    )
    def test_keyboard_without_buttons_is_empty(self, markup):
        assert markup.kind is MarkupKind.NONE
        assert markup.is_empty()

    def test_button_keeps_both_targets(self):
        button = InlineButton("Docs", callback_data="docs", url="https://example.org")

        assert button.callback_data == "docs"
        assert button.url == "https://example.org"

    def test_frozen(self):
        markup = ReplyMarkup.none()

        with pytest.raises(AttributeError):
            markup.keyboard = Keyboard()
