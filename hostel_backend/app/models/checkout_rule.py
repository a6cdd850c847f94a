"""
Checkout Rule database model.

Defines the deduction percentage applied when a resident checks out.
"""

from sqlalchemy import Column, Integer, Boolean, DateTime, Enum, Numeric, Index
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base
from hostel_backend.app.models.enums import ResidentType


class CheckoutRule(Base):
    """
    Checkout Rule model.

    A rule with ``resident_id`` set applies to that resident only; a rule
    without one is the default for every resident of its type. A rule
    takes effect once the resident's tenure reaches ``active_after_days``.
    Several active tiers may exist per scope, one per threshold.
    """
    __tablename__ = "checkout_rules"
    __table_args__ = (
        Index("ix_checkout_rules_scope", "resident_type", "resident_id"),
    )

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    resident_type = Column(Enum(ResidentType), nullable=False)
    resident_id = Column(Integer, nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    active_after_days = Column(Integer, default=0, nullable=False)
    percentage = Column(Numeric(5, 2), nullable=False)  # 0-100, not a fraction

    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    def __repr__(self):
        return f"<CheckoutRule(id={self.id}, after={self.active_after_days}d, pct={self.percentage})>"
