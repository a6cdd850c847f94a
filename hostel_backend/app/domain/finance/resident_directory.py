"""
Resident Directory.

Read-only view of the students and staff tables, limited to what the
ledger needs: existence, display name, fallback monthly rate and joining
date.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.staff import Staff
from hostel_backend.app.models.student import Student


@dataclass(frozen=True)
class ResidentProfile:
    resident_type: ResidentType
    resident_id: int
    name: str
    monthly_rate: Optional[Decimal]
    joining_date: Optional[date]


class ResidentDirectory:

    async def get_profile(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> Optional[ResidentProfile]:
        if resident_type == ResidentType.STAFF:
            result = await db.execute(select(Staff).where(Staff.id == resident_id))
            staff = result.scalar_one_or_none()
            if not staff:
                return None
            return ResidentProfile(
                resident_type=resident_type,
                resident_id=staff.id,
                name=staff.staff_name,
                monthly_rate=staff.salary_amount,
                joining_date=staff.joining_date,
            )

        result = await db.execute(select(Student).where(Student.id == resident_id))
        student = result.scalar_one_or_none()
        if not student:
            return None
        return ResidentProfile(
            resident_type=resident_type,
            resident_id=student.id,
            name=student.student_name,
            monthly_rate=student.monthly_fee,
            joining_date=student.joining_date,
        )

    async def resident_exists(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> bool:
        model = Staff if resident_type == ResidentType.STAFF else Student
        result = await db.execute(select(model.id).where(model.id == resident_id))
        return result.scalar_one_or_none() is not None
