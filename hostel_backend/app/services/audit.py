"""
Audit logging service for tracking ledger writes and rule changes.

Provides centralized logging for compliance and reconciliation.
"""

import logging
from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from sqlalchemy.exc import SQLAlchemyError
from hostel_backend.app.models.audit_log import AuditLog

logger = logging.getLogger("hostel.audit")


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    FINANCIAL_RECORD_CREATED = "FINANCIAL_RECORD_CREATED"
    PAYMENT_APPLIED = "PAYMENT_APPLIED"
    CHECKOUT_SETTLED = "CHECKOUT_SETTLED"

    CHECKOUT_RULE_CREATED = "CHECKOUT_RULE_CREATED"
    CHECKOUT_RULE_UPDATED = "CHECKOUT_RULE_UPDATED"
    CHECKOUT_RULE_TOGGLED = "CHECKOUT_RULE_TOGGLED"
    CHECKOUT_RULE_DELETED = "CHECKOUT_RULE_DELETED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_id: Optional[int] = None,
    actor_username: Optional[str] = None,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None
) -> Optional[AuditLog]:
    """
    Log a financial event to the audit log.

    The ledger write being audited is already committed, so a failed
    audit insert is rolled back and logged rather than raised.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_id: ID of user performing the action
        actor_username: Username of actor
        target_type: Kind of record acted upon
        target_id: ID of record acted upon
        metadata: Additional context as JSON (amounts as strings)

    Returns:
        Created AuditLog instance, or None if it could not be stored
    """
    audit_log = AuditLog(
        actor_id=actor_id,
        actor_username=actor_username,
        action=action,
        target_type=target_type,
        target_id=target_id,
        meta_data=metadata
    )

    try:
        db.add(audit_log)
        await db.commit()
        await db.refresh(audit_log)
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.error(
            "Audit log write failed: %s", exc,
            extra={"action": action, "target_type": target_type, "target_id": target_id}
        )
        return None

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    target_type: Optional[str] = None,
    target_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering.

    Args:
        db: Database session
        target_type: Filter by target kind
        target_id: Filter by target ID
        action: Filter by action type
        limit: Maximum number of records to return

    Returns:
        List of AuditLog instances, most recent first
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if target_type:
        query = query.where(AuditLog.target_type == target_type)

    if target_id:
        query = query.where(AuditLog.target_id == target_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
