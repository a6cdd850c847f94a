"""
Staff database model.

Part of the resident directory; staff who live on site carry a ledger
just like students.
"""

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Date, Numeric
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base


class Staff(Base):
    """Staff resident."""
    __tablename__ = "staff"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    staff_name = Column(String(150), nullable=False)
    position = Column(String(100), nullable=True)
    department = Column(String(100), nullable=True)

    # Used as the monthly rate for checkout deductions
    salary_amount = Column(Numeric(10, 2), nullable=True)
    joining_date = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Staff(id={self.id}, name='{self.staff_name}')>"
