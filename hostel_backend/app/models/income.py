"""
Income database model.

Payments received from residents. Append-only.
"""

from sqlalchemy import Column, Integer, String, Text, Date, DateTime, Enum, Numeric, Index
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.ledger_enums import PaymentStatus


class Income(Base):
    """
    Income entry.

    ``received_amount`` is what the balance summary counts as paid.
    ``due_amount`` is filled by callers that split partial payments.
    """
    __tablename__ = "incomes"
    __table_args__ = (
        Index("ix_incomes_resident", "resident_type", "resident_id"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    resident_type = Column(Enum(ResidentType), nullable=False)
    resident_id = Column(Integer, nullable=False)

    amount = Column(Numeric(10, 2), nullable=False)
    received_amount = Column(Numeric(10, 2), nullable=False, default=0)
    due_amount = Column(Numeric(10, 2), nullable=False, default=0)

    income_date = Column(Date, nullable=False)
    payment_type = Column(String(50), nullable=False, default="cash")
    payment_status = Column(Enum(PaymentStatus), default=PaymentStatus.PAID, nullable=False)
    remark = Column(Text, nullable=True)

    # Timestamps (Append-only - no updated_at)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<Income(id={self.id}, {self.resident_type.value}={self.resident_id}, received={self.received_amount})>"
