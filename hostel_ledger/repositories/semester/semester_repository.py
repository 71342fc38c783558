"""
Semester repository.
"""

from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.semester import Semester
from hostel_ledger.repositories.base.base_repository import BaseRepository


class SemesterRepository(BaseRepository[Semester]):
    """Repository for semester lookups and activation."""

    def __init__(self, session: AsyncSession):
        super().__init__(Semester, session)

    # ==================== Active Semester ====================

    async def get_active_semester_id(self, hostel_id: int) -> Optional[int]:
        """
        Get the id of the hostel's active semester.

        Args:
            hostel_id: Hostel ID

        Returns:
            Semester id, or None when no semester is active
        """
        result = await self.session.execute(
            select(Semester.id)
            .where(Semester.hostel_id == hostel_id, Semester.is_active.is_(True))
            .order_by(Semester.id)
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_active_semester_ids(self) -> List[int]:
        """Active semester of every hostel."""
        result = await self.session.execute(
            select(Semester.id).where(Semester.is_active.is_(True)).order_by(Semester.id)
        )
        return list(result.scalars().all())

    async def count_other_active(self, hostel_id: int, semester_id: int) -> int:
        return await self.count(
            Semester.hostel_id == hostel_id,
            Semester.is_active.is_(True),
            Semester.id != semester_id,
        )

    async def activate_exclusively(self, semester: Semester) -> Semester:
        """
        Make ``semester`` the only active semester of its hostel.

        Both updates run in the caller's transaction.
        """
        await self.session.execute(
            update(Semester)
            .where(Semester.hostel_id == semester.hostel_id)
            .values(is_active=False)
            .execution_options(synchronize_session="fetch")
        )
        semester.is_active = True
        await self.session.flush()
        return semester

    # ==================== Queries ====================

    async def list_for_hostel(self, hostel_id: Optional[int] = None) -> List[Semester]:
        """Semesters newest first; every hostel when ``hostel_id`` is None."""
        criteria = [Semester.hostel_id == hostel_id] if hostel_id else []
        return await self.find_all(
            *criteria,
            order_by=(Semester.start_date.desc(), Semester.created_at.desc()),
        )

    async def belongs_to_hostel(self, semester_id: int, hostel_id: int) -> bool:
        found = await self.count(Semester.id == semester_id, Semester.hostel_id == hostel_id)
        return found > 0
