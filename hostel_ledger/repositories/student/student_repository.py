"""
Student repository.
"""

from typing import Optional, Tuple

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.hostel import Hostel
from hostel_ledger.models.student import Student
from hostel_ledger.repositories.base.base_repository import BaseRepository


class StudentRepository(BaseRepository[Student]):
    """Repository for student lookups."""

    def __init__(self, session: AsyncSession):
        super().__init__(Student, session)

    async def get_with_hostel_name(self, student_id: int) -> Tuple[Optional[Student], Optional[str]]:
        """
        Get a student together with the name of its hostel.

        Args:
            student_id: Student ID

        Returns:
            (student, hostel name); (None, None) when the student does not exist
        """
        result = await self.session.execute(
            select(Student, Hostel.name)
            .outerjoin(Hostel, Hostel.id == Student.hostel_id)
            .where(Student.id == student_id)
        )
        row = result.first()
        if row is None:
            return None, None
        return row[0], row[1]
