"""
Room repository.
"""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.room import Room
from hostel_ledger.repositories.base.base_repository import BaseRepository


class RoomRepository(BaseRepository[Room]):
    def __init__(self, session: AsyncSession):
        super().__init__(Room, session)

    async def get_active(self, room_id: int) -> Optional[Room]:
        """Get a room that is still in service."""
        return await self.find_one(Room.id == room_id, Room.is_active.is_(True))
