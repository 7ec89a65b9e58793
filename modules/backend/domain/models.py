"""
Domain Models.

Internal representation of messages, users and callback logs used by the
business service and the persistence layer. These are plain value objects;
the wire (protocol) shapes live in modules.backend.schemas.bot and are
mapped onto these by modules.backend.converters.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from modules.backend.core.utils import utc_now
from modules.backend.domain.markup import ReplyMarkup


class Direction(str, Enum):
    """Whether a message came from a user or was produced by the bot."""

    INCOMING = "incoming"
    OUTGOING = "outgoing"


class MessageStatus(str, Enum):
    RECEIVED = "received"
    SENT = "sent"
    PENDING = "pending"
    FAILED = "failed"


@dataclass
class DomainUser:
    id: int
    first_name: str = ""
    last_name: str = ""
    username: str = ""


@dataclass
class DomainMessage:
    """
    A persisted chat message.

    id is assigned by the store on save and is None until then.
    """

    message_id: int
    chat_id: int
    user_id: int
    text: str
    direction: Direction
    status: MessageStatus
    timestamp: datetime = field(default_factory=utc_now)
    id: str | None = None


@dataclass
class CallbackLog:
    """A persisted inline keyboard button press."""

    callback_id: str
    user_id: int
    chat_id: int
    message_id: int
    data: str
    timestamp: datetime = field(default_factory=utc_now)
    id: str | None = None


@dataclass
class IncomingMessage:
    """A message pushed to the service through the SendMessage call."""

    chat_id: int
    text: str
    received_at: datetime = field(default_factory=utc_now)
    reply_markup: ReplyMarkup = field(default_factory=ReplyMarkup.none)


@dataclass
class MessageResponse:
    success: bool
    error: str | None = None
