"""
Checkout Financial database model.

Immutable deduction recorded when a resident's checkout is settled.
"""

from datetime import date
from sqlalchemy import Column, Integer, ForeignKey, Date, DateTime, Enum, Numeric, UniqueConstraint, Index
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base
from hostel_backend.app.models.enums import ResidentType


class CheckoutFinancial(Base):
    """
    Checkout event.

    Created exactly once per completed checkout (unique per resident type
    and checkout id). NO updates or deletions allowed.
    """
    __tablename__ = "checkout_financials"
    __table_args__ = (
        UniqueConstraint("resident_type", "checkout_id", name="uq_checkout_financials_checkout"),
        Index("ix_checkout_financials_resident", "resident_type", "resident_id"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    resident_type = Column(Enum(ResidentType), nullable=False)
    resident_id = Column(Integer, nullable=False)

    # Attendance check-in/check-out row this settles
    checkout_id = Column(Integer, nullable=False)

    checkout_date = Column(Date, nullable=False, default=date.today, index=True)
    checkout_duration = Column(Integer, nullable=False)  # days
    deducted_amount = Column(Numeric(10, 2), nullable=False)
    checkout_rule_id = Column(Integer, ForeignKey("checkout_rules.id"), nullable=True, index=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    def __repr__(self):
        return f"<CheckoutFinancial(id={self.id}, checkout={self.checkout_id}, deducted={self.deducted_amount})>"
