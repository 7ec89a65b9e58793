"""
Callback Log Repository.

Data access layer for inline keyboard button presses.
"""

import dataclasses

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from modules.backend.domain.models import CallbackLog
from modules.backend.models.callback_log import CallbackLogRecord
from modules.backend.repositories.base import BaseRepository


class CallbackLogRepository(BaseRepository[CallbackLogRecord]):
    """Repository for CallbackLogRecord."""

    model = CallbackLogRecord

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session)

    async def save(self, log: CallbackLog) -> CallbackLog:
        """Persist a callback log and return it with its store-assigned id."""
        record = await self.create(
            callback_id=log.callback_id,
            user_id=log.user_id,
            chat_id=log.chat_id,
            message_id=log.message_id,
            data=log.data,
            timestamp=log.timestamp,
        )
        return dataclasses.replace(log, id=record.id)

    async def get_by_callback_id(self, callback_id: str) -> CallbackLog | None:
        result = await self.session.execute(
            select(CallbackLogRecord).where(CallbackLogRecord.callback_id == callback_id)
        )
        record = result.scalars().first()
        if record is None:
            return None
        return CallbackLog(
            id=record.id,
            callback_id=record.callback_id,
            user_id=record.user_id,
            chat_id=record.chat_id,
            message_id=record.message_id,
            data=record.data,
            timestamp=record.timestamp,
        )
