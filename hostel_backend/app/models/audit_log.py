"""
Audit Log Database Model.

Tracks ledger writes and rule changes made by hostel administrators.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from hostel_backend.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking financial actions.

    Events logged:
    - PAYMENT_APPLIED
    - FINANCIAL_RECORD_CREATED
    - CHECKOUT_SETTLED
    - CHECKOUT_RULE_CREATED / UPDATED / TOGGLED / DELETED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action (None for system actions)
    actor_id = Column(Integer, index=True, nullable=True)
    actor_username = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # What it was performed on (e.g. "student" 12, "checkout_rule" 3)
    target_type = Column(String(50), nullable=True)
    target_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, target={self.target_type}:{self.target_id})>"
