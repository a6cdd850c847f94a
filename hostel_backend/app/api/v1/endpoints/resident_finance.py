"""
Resident Finance API Endpoints.

Balance summaries, payments, registration records and checkout settlement
for students and staff.
"""

from fastapi import APIRouter, Depends, Path, status
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from typing import List, Union

from hostel_backend.app.db.session import get_db
from hostel_backend.app.models.enums import UserRole, ResidentType
from hostel_backend.app.models.resident_financial import ResidentFinancial
from hostel_backend.app.schemas.finance import (
    BalanceSummaryResponse, PaymentCreate, PaymentErrorResponse,
    FinancialRecordCreate, FinancialRecordResponse, IncomeResponse
)
from hostel_backend.app.schemas.checkout import (
    CheckoutSettleRequest, CheckoutSettlementResponse, CheckoutHistoryResponse,
    CheckoutFinancialResponse
)
from hostel_backend.app.core.exceptions import ResourceNotFoundError
from hostel_backend.app.core.guards import require_role, ResidentAccessGuard
from hostel_backend.app.core.dependencies import (
    get_current_user, get_summary_builder, get_payment_service, get_settlement_service
)
from hostel_backend.app.domain.finance.summary_builder import BalanceSummaryBuilder
from hostel_backend.app.domain.finance.payment_service import PaymentService
from hostel_backend.app.domain.finance.checkout_settlement import CheckoutSettlementService
from hostel_backend.app.domain.finance.results import PaymentError
from hostel_backend.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/residents", tags=["Residents - Finance"])

resident_guard = ResidentAccessGuard()


async def ensure_resident_exists(
    db: AsyncSession,
    builder: BalanceSummaryBuilder,
    resident_type: ResidentType,
    resident_id: int
):
    """404 when the directory does not know the resident."""
    if not await builder.directory.resident_exists(db, resident_type, resident_id):
        raise ResourceNotFoundError(resident_type.value.capitalize(), resident_id)


@router.get("/{resident_type}/{resident_id}/financial-summary", response_model=BalanceSummaryResponse)
async def get_financial_summary(
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(get_current_user),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    db: AsyncSession = Depends(get_db)
):
    """
    Get the resident's current balance.

    Returns 200 even when the summary could not be computed; such summaries
    carry status 'error' and zeroed amounts.
    """
    resident_guard.enforce(resident_type, resident_id, current_user)
    await ensure_resident_exists(db, builder, resident_type, resident_id)

    summary = await builder.build_summary(db, resident_type, resident_id)
    return BalanceSummaryResponse.from_summary(summary)


@router.post(
    "/{resident_type}/{resident_id}/payments",
    response_model=Union[BalanceSummaryResponse, PaymentErrorResponse]
)
async def apply_payment(
    payment: PaymentCreate,
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    payment_service: PaymentService = Depends(get_payment_service),
    db: AsyncSession = Depends(get_db)
):
    """
    Record a payment and return the rebuilt balance.

    If the payment cannot be recorded the body is {error, message}.
    Deployments without an income ledger record nothing and return the
    current balance.
    """
    await ensure_resident_exists(db, builder, resident_type, resident_id)

    result = await payment_service.apply_payment(
        db,
        resident_type,
        resident_id,
        amount=payment.amount,
        payment_type=payment.payment_type,
        remark=payment.remark or ""
    )

    if isinstance(result, PaymentError):
        return PaymentErrorResponse(error=result.error, message=result.message)

    if not builder.capabilities.income_ledger_enabled:
        return BalanceSummaryResponse.from_summary(result)

    await log_event(
        db=db,
        action=AuditAction.PAYMENT_APPLIED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type=resident_type.value,
        target_id=resident_id,
        metadata={
            "amount": str(payment.amount),
            "payment_type": payment.payment_type or payment_service.default_payment_type,
            "remaining_balance": str(result.remaining_balance)
        }
    )

    return BalanceSummaryResponse.from_summary(result)


@router.get("/{resident_type}/{resident_id}/payments", response_model=List[IncomeResponse])
async def list_payments(
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(get_current_user),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    payment_service: PaymentService = Depends(get_payment_service),
    db: AsyncSession = Depends(get_db)
):
    """Payments received from the resident, newest first."""
    resident_guard.enforce(resident_type, resident_id, current_user)
    await ensure_resident_exists(db, builder, resident_type, resident_id)

    return await payment_service.payment_history(db, resident_type, resident_id)


@router.get("/{resident_type}/{resident_id}/financial-records", response_model=List[FinancialRecordResponse])
async def list_financial_records(
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(get_current_user),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    db: AsyncSession = Depends(get_db)
):
    """List the resident's financial records, latest payment date first."""
    resident_guard.enforce(resident_type, resident_id, current_user)
    await ensure_resident_exists(db, builder, resident_type, resident_id)

    result = await db.execute(
        select(ResidentFinancial).where(
            ResidentFinancial.resident_type == resident_type,
            ResidentFinancial.resident_id == resident_id
        ).order_by(desc(ResidentFinancial.payment_date), desc(ResidentFinancial.id))
    )
    return result.scalars().all()


@router.post(
    "/{resident_type}/{resident_id}/financial-records",
    response_model=FinancialRecordResponse,
    status_code=status.HTTP_201_CREATED
)
async def create_financial_record(
    record: FinancialRecordCreate,
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    builder: BalanceSummaryBuilder = Depends(get_summary_builder),
    db: AsyncSession = Depends(get_db)
):
    """Create a registration/update-time financial record."""
    await ensure_resident_exists(db, builder, resident_type, resident_id)

    financial = ResidentFinancial(
        resident_type=resident_type,
        resident_id=resident_id,
        **record.model_dump()
    )

    db.add(financial)
    await db.commit()
    await db.refresh(financial)

    response = FinancialRecordResponse.model_validate(financial)

    await log_event(
        db=db,
        action=AuditAction.FINANCIAL_RECORD_CREATED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type=resident_type.value,
        target_id=resident_id,
        metadata={
            "record_id": financial.id,
            "amount": str(financial.amount),
            "balance_type": financial.balance_type.value if financial.balance_type else None
        }
    )

    return response


@router.post(
    "/{resident_type}/{resident_id}/checkouts",
    response_model=CheckoutSettlementResponse,
    status_code=status.HTTP_201_CREATED
)
async def settle_checkout(
    request: CheckoutSettleRequest,
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(require_role([UserRole.ADMIN])),
    settlement_service: CheckoutSettlementService = Depends(get_settlement_service),
    db: AsyncSession = Depends(get_db)
):
    """
    Settle a completed checkout.

    Staff checkouts resolve the applicable checkout rule from tenure.
    Student checkouts use the given percentage unless use_rules is set.
    """
    settlement = await settlement_service.settle(
        db,
        resident_type,
        resident_id,
        checkout_id=request.checkout_id,
        checkout_duration_days=request.checkout_duration,
        checkout_date=request.checkout_date,
        percentage=request.percentage,
        use_rules=request.use_rules
    )

    response = CheckoutSettlementResponse(
        checkout=CheckoutFinancialResponse.model_validate(settlement.checkout),
        percentage=settlement.percentage,
        monthly_fee=settlement.monthly_fee,
        tenure_days=settlement.tenure_days,
        summary=BalanceSummaryResponse.from_summary(settlement.summary)
    )

    await log_event(
        db=db,
        action=AuditAction.CHECKOUT_SETTLED,
        actor_id=current_user["user_id"],
        actor_username=current_user.get("sub"),
        target_type=resident_type.value,
        target_id=resident_id,
        metadata={
            "checkout_id": response.checkout.checkout_id,
            "deducted_amount": str(response.checkout.deducted_amount),
            "checkout_rule_id": response.checkout.checkout_rule_id
        }
    )

    return response


@router.get("/{resident_type}/{resident_id}/checkouts", response_model=CheckoutHistoryResponse)
async def list_checkouts(
    resident_type: ResidentType = Path(..., description="student or staff"),
    resident_id: int = Path(..., description="Resident ID"),
    current_user: dict = Depends(get_current_user),
    settlement_service: CheckoutSettlementService = Depends(get_settlement_service),
    db: AsyncSession = Depends(get_db)
):
    """Settled checkouts for the resident with deduction totals."""
    resident_guard.enforce(resident_type, resident_id, current_user)

    history = await settlement_service.checkout_history(db, resident_type, resident_id)

    return CheckoutHistoryResponse(
        checkouts=[CheckoutFinancialResponse.model_validate(c) for c in history.checkouts],
        total_deducted=history.total_deducted,
        total_checkouts=history.total_checkouts,
        average_deduction=history.average_deduction
    )
