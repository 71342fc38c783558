"""
Check-in repository.
"""

from typing import Any, Dict, List, Optional, Sequence

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_ledger.models.check_in import CheckIn
from hostel_ledger.models.student import Student
from hostel_ledger.repositories.base.base_repository import BaseRepository


class CheckInRepository(BaseRepository[CheckIn]):
    """Repository for check-in records."""

    def __init__(self, session: AsyncSession):
        super().__init__(CheckIn, session)

    async def get_open(self, student_id: int, semester_id: int) -> Optional[CheckIn]:
        """
        Get the student's check-in that has not been closed yet.

        Args:
            student_id: Student ID
            semester_id: Semester ID

        Returns:
            Open check-in or None
        """
        return await self.find_one(
            CheckIn.student_id == student_id,
            CheckIn.semester_id == semester_id,
            CheckIn.checked_out_at.is_(None),
        )

    async def list_for_semesters(
        self,
        semester_ids: Sequence[int],
        hostel_id: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """
        Check-ins of the given semesters with student names, newest first.

        Args:
            semester_ids: Semesters to include
            hostel_id: Restrict to one hostel

        Returns:
            List of row dictionaries
        """
        if not semester_ids:
            return []
        stmt = (
            select(CheckIn, Student.full_name, Student.registration_number)
            .join(Student, Student.id == CheckIn.student_id)
            .where(CheckIn.semester_id.in_(list(semester_ids)))
        )
        if hostel_id:
            stmt = stmt.where(CheckIn.hostel_id == hostel_id)
        stmt = stmt.order_by(CheckIn.checked_in_at.desc(), CheckIn.id.desc())

        result = await self.session.execute(stmt)
        rows = []
        for check_in, full_name, registration_number in result.all():
            row = check_in.to_dict()
            row["checked_in_at"] = check_in.checked_in_at
            row["checked_out_at"] = check_in.checked_out_at
            row["full_name"] = full_name
            row["registration_number"] = registration_number
            rows.append(row)
        return rows
