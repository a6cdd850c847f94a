"""
Resident Financial Record database model.

Registration and update-time charges for a student or staff resident.
"""

from sqlalchemy import Column, Integer, Text, Date, DateTime, Enum, Numeric, Index
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.ledger_enums import BalanceType


class ResidentFinancial(Base):
    """
    Resident financial record.

    Only ``due`` records count towards what the resident owes. Records are
    read back in insertion order; the monthly fee of the last record that
    sets one is the resident's current rate.
    Not updated once payments are recorded against it.
    """
    __tablename__ = "resident_financials"
    __table_args__ = (
        Index("ix_resident_financials_resident", "resident_type", "resident_id"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    resident_type = Column(Enum(ResidentType), nullable=False)
    resident_id = Column(Integer, nullable=False)

    # Financials
    amount = Column(Numeric(10, 2), nullable=False)
    balance_type = Column(Enum(BalanceType), nullable=True)
    monthly_fee = Column(Numeric(10, 2), nullable=True)
    admission_fee = Column(Numeric(10, 2), nullable=True)
    form_fee = Column(Numeric(10, 2), nullable=True)
    security_deposit = Column(Numeric(10, 2), nullable=True)
    previous_balance = Column(Numeric(10, 2), nullable=True)

    payment_date = Column(Date, nullable=False)
    joining_date = Column(Date, nullable=True)
    remark = Column(Text, nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<ResidentFinancial(id={self.id}, {self.resident_type.value}={self.resident_id}, amount={self.amount})>"
