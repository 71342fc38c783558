"""
Message history repository.
"""

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.notification import MessageHistory
from hostel_ledger.repositories.base.base_repository import BaseRepository


class MessageHistoryRepository(BaseRepository[MessageHistory]):
    """Repository for the outbound email/SMS log."""

    def __init__(self, session: AsyncSession):
        super().__init__(MessageHistory, session)

    async def list_for_student(
        self,
        student_id: int,
        message_type: Optional[str] = None,
    ) -> List[MessageHistory]:
        criteria = [MessageHistory.student_id == student_id]
        if message_type:
            criteria.append(MessageHistory.message_type == message_type)
        return await self.find_all(*criteria, order_by=(MessageHistory.id.asc(),))
