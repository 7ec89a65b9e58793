"""
Message Repository.

Data access layer for chat messages. Converts between the domain
DomainMessage and the MessageRecord row.
"""

import dataclasses

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.domain.models import Direction, DomainMessage, MessageStatus
from modules.backend.models.message import MessageRecord
from modules.backend.repositories.base import BaseRepository


def _to_domain(record: MessageRecord) -> DomainMessage:
    return DomainMessage(
        id=record.id,
        message_id=record.message_id,
        chat_id=record.chat_id,
        user_id=record.user_id,
        text=record.text,
        direction=Direction(record.direction),
        status=MessageStatus(record.status),
        timestamp=record.timestamp,
    )


class MessageRepository(BaseRepository[MessageRecord]):
    """Repository for MessageRecord."""

    model = MessageRecord

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def save(self, message: DomainMessage) -> DomainMessage:
        """
        Persist a message.

        Returns:
            A copy of the message carrying the store-assigned id
        """
        record = await self.create(
            message_id=message.message_id,
            chat_id=message.chat_id,
            user_id=message.user_id,
            text=message.text,
            direction=message.direction.value,
            status=message.status.value,
            timestamp=message.timestamp,
        )
        return dataclasses.replace(message, id=record.id)

    async def list_by_chat(self, chat_id: int, limit: int = 50) -> list[DomainMessage]:
        """Messages of one chat, oldest first."""
        result = await self.session.execute(
            select(MessageRecord)
            .where(MessageRecord.chat_id == chat_id)
            .order_by(MessageRecord.timestamp, MessageRecord.created_at)
            .limit(limit)
        )
        return [_to_domain(record) for record in result.scalars().all()]
