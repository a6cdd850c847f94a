"""
Student database model.

Part of the resident directory. Onboarding fields beyond what the ledger
reads are owned by the student management screens.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Numeric
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base


class Student(Base):
    """Student resident."""
    __tablename__ = "students"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    student_name = Column(String(150), nullable=False)
    email = Column(String(255), nullable=True)
    room_no = Column(String(20), nullable=True)

    # Fallback rate when no financial record carries a monthly fee
    monthly_fee = Column(Numeric(10, 2), nullable=True)
    joining_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Student(id={self.id}, name='{self.student_name}')>"
