"""
Unit Tests for Protocol/Domain Converters.

Table-driven field checks for both directions.
"""

from datetime import datetime

import pytest

from modules.backend.converters.to_domain import (
    from_epoch,
    to_callback_log,
    to_domain_markup,
    to_domain_message,
    to_domain_user,
    to_incoming_message,
)
from modules.backend.converters.to_protocol import (
    to_outgoing_message,
    to_proto_markup,
    to_proto_response,
    to_proto_user,
)
from modules.backend.core.utils import utc_now
from modules.backend.domain.markup import InlineButton, MarkupKind, ReplyMarkup
from modules.backend.domain.models import (
    Direction,
    DomainUser,
    MessageResponse,
    MessageStatus,
)
from modules.backend.schemas import bot as proto


class TestToDomainUser:
    def test_none(self):
        assert to_domain_user(None) is None

    def test_fields(self):
        user = to_domain_user(proto.User(id=9, first_name="Ann", last_name="Lee", username="ann"))

        assert user == DomainUser(id=9, first_name="Ann", last_name="Lee", username="ann")

    def test_back_to_protocol(self):
        user = DomainUser(id=9, first_name="Ann")

        assert to_proto_user(user) == proto.User(id=9, first_name="Ann")
        assert to_proto_user(None) is None


class TestToDomainMessage:
    @pytest.mark.parametrize(
        "field, expected",
        [
            ("message_id", 100),
            ("chat_id", 42),
            ("user_id", 9),
            ("text", "hello"),
            ("direction", Direction.INCOMING),
            ("status", MessageStatus.RECEIVED),
            ("timestamp", datetime(2023, 11, 14, 22, 13, 20)),
            ("id", None),
        ],
    )
    def test_field(self, make_message, field, expected):
        message = to_domain_message(make_message(text="hello", date=1700000000))

        assert getattr(message, field) == expected

    def test_direction_and_status_override(self, make_message):
        message = to_domain_message(
            make_message(), direction=Direction.OUTGOING, status=MessageStatus.SENT
        )

        assert message.direction is Direction.OUTGOING
        assert message.status is MessageStatus.SENT

    def test_from_epoch_is_naive_utc(self):
        assert from_epoch(0) == datetime(1970, 1, 1)
        assert from_epoch(0).tzinfo is None


class TestToCallbackLog:
    def test_fields(self, make_callback):
        log = to_callback_log(make_callback(data="help", callback_id="c1"))

        assert (log.callback_id, log.user_id, log.chat_id, log.message_id, log.data) == (
            "c1",
            9,
            42,
            5,
            "help",
        )
        assert log.id is None

    def test_captures_log_time(self, make_callback):
        before = utc_now()

        log = to_callback_log(make_callback())

        assert log.timestamp >= before


class TestMarkup:
    def test_absent_markup_is_none(self):
        assert to_domain_markup(None).kind is MarkupKind.NONE

    def test_empty_one_of_is_none(self):
        assert to_domain_markup(proto.ReplyMarkup()).kind is MarkupKind.NONE

    def test_inline_to_domain(self):
        markup = to_domain_markup(
            proto.ReplyMarkup(
                inline_keyboard=proto.InlineKeyboard(
                    rows=[
                        [
                            proto.InlineKeyboardButton(text="Help", callback_data="help"),
                            proto.InlineKeyboardButton(text="Docs", url="https://example.org"),
                        ]
                    ]
                )
            )
        )

        assert markup.kind is MarkupKind.INLINE
        assert markup.inline_keyboard.rows == [
            [
                InlineButton("Help", callback_data="help"),
                InlineButton("Docs", url="https://example.org"),
            ]
        ]

    def test_reply_keyboard_to_domain(self):
        markup = to_domain_markup(
            proto.ReplyMarkup(
                reply_keyboard=proto.ReplyKeyboard(
                    rows=[[proto.KeyboardButton(text="Yes")], [proto.KeyboardButton(text="No")]],
                    resize_keyboard=True,
                )
            )
        )

        assert markup.kind is MarkupKind.PLAIN
        assert [[b.text for b in row] for row in markup.keyboard.rows] == [["Yes"], ["No"]]
        assert markup.keyboard.resize is True
        assert markup.keyboard.one_time is False

    @pytest.mark.parametrize(
        "markup",
        [
            ReplyMarkup.inline([[InlineButton("Help", callback_data="help")]]),
            ReplyMarkup.plain([["Yes", "No"]], one_time=True),
        ],
    )
    def test_domain_round_trip(self, markup):
        assert to_domain_markup(to_proto_markup(markup)) == markup

    @pytest.mark.parametrize("markup", [None, ReplyMarkup.none(), ReplyMarkup.inline([])])
    def test_no_keyboard_maps_to_absent(self, markup):
        assert to_proto_markup(markup) is None

    def test_protocol_rejects_both_keyboards(self):
        with pytest.raises(ValueError):
            proto.ReplyMarkup(
                inline_keyboard=proto.InlineKeyboard(),
                reply_keyboard=proto.ReplyKeyboard(),
            )


class TestToIncomingMessage:
    def test_fields(self):
        incoming = to_incoming_message(
            proto.SendMessageRequest(
                chat_id=42,
                text="hi",
                reply_markup=proto.ReplyMarkup(
                    reply_keyboard=proto.ReplyKeyboard(rows=[[proto.KeyboardButton(text="A")]])
                ),
            )
        )

        assert incoming.chat_id == 42
        assert incoming.text == "hi"
        assert incoming.reply_markup.kind is MarkupKind.PLAIN
        assert incoming.received_at is not None


class TestToProtocolResponses:
    def test_outgoing_message(self):
        outgoing = to_outgoing_message(42, "hi")

        assert outgoing == proto.OutgoingMessage(chat_id=42, text="hi")

    def test_outgoing_message_with_markup(self):
        outgoing = to_outgoing_message(
            42, "hi", ReplyMarkup.inline([[InlineButton("Help", callback_data="help")]])
        )

        assert outgoing.reply_markup.inline_keyboard.rows[0][0].callback_data == "help"

    @pytest.mark.parametrize(
        "response, success, error",
        [
            (MessageResponse(success=True), True, None),
            (MessageResponse(success=False, error="nope"), False, "nope"),
            (None, False, "empty response"),
        ],
    )
    def test_send_message_response(self, response, success, error):
        result = to_proto_response(response)

        assert result.success is success
        assert result.error == error
