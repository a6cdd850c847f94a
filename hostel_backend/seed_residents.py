"""
Database seeding script for sample residents.

Creates one student and one staff member with opening financial records,
plus default staff checkout rule tiers. Run after the database is set up.
"""

import asyncio
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from hostel_backend.app.db.session import AsyncSessionLocal, engine, Base
from hostel_backend.app.models.student import Student
from hostel_backend.app.models.staff import Staff
from hostel_backend.app.models.resident_financial import ResidentFinancial
from hostel_backend.app.models.checkout_rule import CheckoutRule
from hostel_backend.app.models.checkout_financial import CheckoutFinancial
from hostel_backend.app.models.income import Income
from hostel_backend.app.models.audit_log import AuditLog
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.ledger_enums import BalanceType
from sqlalchemy import select


async def seed_residents():
    """
    Seed sample residents.

    Creates:
    - 1 student with an admission record
    - 1 staff member with a joining record
    - Staff checkout rules: 100% from day 0, 50% after 30 days
    """
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting resident seeding...")

        result = await db.execute(select(CheckoutRule).where(CheckoutRule.resident_id.is_(None)))
        if result.scalars().first():
            print("ℹ️  Default checkout rules already exist, skipping seeding")
            return

        student = Student(
            student_name="Sample Student",
            email="student@hostel.local",
            room_no="101",
            monthly_fee=Decimal("15000.00"),
            joining_date=date.today(),
            is_active=True
        )
        staff = Staff(
            staff_name="Sample Warden",
            position="Warden",
            department="Operations",
            salary_amount=Decimal("3000.00"),
            joining_date=date.today(),
            is_active=True
        )
        db.add_all([student, staff])
        await db.flush()
        print(f"✅ Created student (id: {student.id}) and staff member (id: {staff.id})")

        db.add(ResidentFinancial(
            resident_type=ResidentType.STUDENT,
            resident_id=student.id,
            amount=Decimal("50000.00"),
            balance_type=BalanceType.DUE,
            monthly_fee=Decimal("15000.00"),
            admission_fee=Decimal("5000.00"),
            form_fee=Decimal("500.00"),
            security_deposit=Decimal("14500.00"),
            payment_date=date.today(),
            joining_date=date.today(),
            remark="Admission"
        ))
        db.add(ResidentFinancial(
            resident_type=ResidentType.STAFF,
            resident_id=staff.id,
            amount=Decimal("0.00"),
            balance_type=BalanceType.DUE,
            monthly_fee=Decimal("3000.00"),
            payment_date=date.today(),
            joining_date=date.today(),
            remark="Joining"
        ))
        print("✅ Created opening financial records")

        db.add_all([
            CheckoutRule(resident_type=ResidentType.STAFF, active_after_days=0, percentage=Decimal("100.00")),
            CheckoutRule(resident_type=ResidentType.STAFF, active_after_days=30, percentage=Decimal("50.00")),
        ])
        print("✅ Created default staff checkout rules")

        await db.commit()

        print("\n🎉 Resident seeding completed successfully!")
        print("\nSeeded residents:")
        print(f"  - STUDENT: {student.student_name} (id {student.id}), owes 50000.00")
        print(f"  - STAFF:   {staff.staff_name} (id {staff.id})")


if __name__ == "__main__":
    asyncio.run(seed_residents())
