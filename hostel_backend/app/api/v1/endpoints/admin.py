"""
Admin API Endpoints.

Ledger-wide reports and the audit trail (admin-only).
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession
from datetime import date
from typing import Optional

from hostel_backend.app.db.session import get_db
from hostel_backend.app.models.enums import UserRole, ResidentType
from hostel_backend.app.schemas.audit import AuditLogResponse, AuditTrailResponse
from hostel_backend.app.schemas.checkout import CheckoutStatisticsResponse
from hostel_backend.app.core.guards import require_role
from hostel_backend.app.core.dependencies import get_settlement_service
from hostel_backend.app.domain.finance.checkout_settlement import CheckoutSettlementService
from hostel_backend.app.services.audit import get_audit_trail

router = APIRouter(prefix="/admin", tags=["Admin"])

require_admin = require_role([UserRole.ADMIN])


@router.get("/checkout-statistics", response_model=CheckoutStatisticsResponse)
async def get_checkout_statistics(
    resident_type: ResidentType = Query(ResidentType.STUDENT, description="student or staff"),
    start_date: Optional[date] = Query(None, description="Defaults to the first of the current month"),
    end_date: Optional[date] = Query(None, description="Defaults to today"),
    admin: dict = Depends(require_admin),
    settlement_service: CheckoutSettlementService = Depends(get_settlement_service),
    db: AsyncSession = Depends(get_db)
):
    """
    Checkout deduction statistics for a period.

    Totals, monthly breakdown, top 10 residents by deduction and counts per
    deduction range. Returns 422 if the period ends before it starts.
    """
    today = date.today()
    statistics = await settlement_service.checkout_statistics(
        db,
        resident_type,
        start_date=start_date or today.replace(day=1),
        end_date=end_date or today
    )
    return CheckoutStatisticsResponse.model_validate(statistics)


@router.get("/audit-logs", response_model=AuditTrailResponse)
async def get_audit_logs(
    target_type: Optional[str] = Query(None, description="Filter by target kind, e.g. student or checkout_rule"),
    target_id: Optional[int] = Query(None, description="Filter by target ID"),
    action: Optional[str] = Query(None, description="Filter by action type"),
    limit: int = Query(100, ge=1, le=500, description="Maximum records to return"),
    admin: dict = Depends(require_admin),
    db: AsyncSession = Depends(get_db)
):
    """
    Get audit trail with optional filtering (admin-only).

    Returns recent ledger writes and rule changes, newest first.
    """
    logs = await get_audit_trail(
        db=db,
        target_type=target_type,
        target_id=target_id,
        action=action,
        limit=limit
    )

    return AuditTrailResponse(
        logs=[AuditLogResponse.model_validate(log) for log in logs],
        total=len(logs)
    )
