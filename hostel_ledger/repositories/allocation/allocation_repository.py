"""
Allocation Repository.

Occupancy counting, per-semester lookups and scoped listings.
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import and_, exists, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.allocation import Allocation
from hostel_ledger.models.check_in import CheckIn
from hostel_ledger.models.room import Room
from hostel_ledger.models.student import Student
from hostel_ledger.repositories.base.base_repository import BaseRepository


class AllocationRepository(BaseRepository[Allocation]):
    """Repository for room allocations."""

    def __init__(self, session: AsyncSession):
        super().__init__(Allocation, session)

    # ==================== Lookups ====================

    async def get_for_student_semester(self, student_id: int, semester_id: int) -> Optional[Allocation]:
        """
        Get the allocation a student holds in a semester.

        Args:
            student_id: Student ID
            semester_id: Semester ID

        Returns:
            Allocation or None
        """
        return await self.find_one(
            Allocation.student_id == student_id,
            Allocation.semester_id == semester_id,
        )

    async def get_with_student_and_room(
        self,
        allocation_id: int,
    ) -> Optional[Tuple[Allocation, Student, Room]]:
        """
        Get an allocation joined to its student and room.

        Args:
            allocation_id: Allocation ID

        Returns:
            (allocation, student, room) or None
        """
        result = await self.session.execute(
            select(Allocation, Student, Room)
            .join(Student, Student.id == Allocation.student_id)
            .join(Room, Room.id == Allocation.room_id)
            .where(Allocation.id == allocation_id)
        )
        row = result.first()
        if row is None:
            return None
        return row[0], row[1], row[2]

    # ==================== Occupancy ====================

    async def count_occupied(self, room_id: int, semester_id: int) -> int:
        """
        Count seats taken in a room for a semester.

        A student whose check-in for the semester has been closed no longer
        occupies a seat, even while the allocation row remains.

        Args:
            room_id: Room ID
            semester_id: Semester ID

        Returns:
            Number of occupied seats
        """
        checked_out = exists().where(
            and_(
                CheckIn.student_id == Allocation.student_id,
                CheckIn.semester_id == Allocation.semester_id,
                CheckIn.checked_out_at.is_not(None),
            )
        )
        result = await self.session.execute(
            select(func.count(func.distinct(Allocation.id))).where(
                Allocation.room_id == room_id,
                Allocation.semester_id == semester_id,
                ~checked_out,
            )
        )
        return int(result.scalar_one() or 0)

    # ==================== Listings ====================

    async def list_for_semesters(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
    ) -> List[Allocation]:
        """
        Allocations of the given semesters, newest first.

        Args:
            semester_ids: Semesters to include
            hostel_id: Restrict to one hostel

        Returns:
            List of allocations
        """
        if not semester_ids:
            return []
        criteria = [Allocation.semester_id.in_(list(semester_ids))]
        if hostel_id:
            criteria.append(Allocation.hostel_id == hostel_id)
        return await self.find_all(
            *criteria,
            order_by=(Allocation.allocated_at.desc(), Allocation.id.desc()),
        )
