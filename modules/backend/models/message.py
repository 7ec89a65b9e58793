"""
Message Model.

Database model for chat messages, both those received from users and the
replies the bot produced for them.
"""

from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from modules.backend.models.base import Base, TimestampMixin, UUIDMixin


class MessageRecord(UUIDMixin, TimestampMixin, Base):
    """
    Message database model.

    message_id is Telegram's id for incoming messages and 0 for replies
    that have not been delivered yet.
    """

    __tablename__ = "messages"

    message_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    chat_id: Mapped[int] = mapped_column(BigInteger, nullable=False, index=True)
    user_id: Mapped[int] = mapped_column(BigInteger, nullable=False)
    text: Mapped[str] = mapped_column(Text, nullable=False, default="")
    direction: Mapped[str] = mapped_column(String(16), nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    timestamp: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    def __repr__(self) -> str:
        return (
            f"<MessageRecord(id={self.id}, chat_id={self.chat_id}, "
            f"direction={self.direction!r})>"
        )
