"""
Finance Calculator API Endpoints.

Quotes for prorated fees and checkout deductions. Nothing is persisted.
"""

from fastapi import APIRouter, Depends, Query
from datetime import date
from decimal import Decimal

from hostel_backend.app.schemas.finance import ProrationQuote
from hostel_backend.app.core.dependencies import get_current_user
from hostel_backend.app.domain.finance.calculators import prorate, checkout_deduction, days_in_month

router = APIRouter(prefix="/finance", tags=["Finance - Calculators"])


@router.get("/prorate", response_model=ProrationQuote)
async def quote_prorated_fee(
    monthly_fee: Decimal = Query(..., ge=0),
    period_start: date = Query(...),
    period_end: date = Query(...),
    current_user: dict = Depends(get_current_user)
):
    """
    Prorated fee for a stay from period_start to period_end, both inclusive.

    Returns 422 if the period ends before it starts.
    """
    amount = prorate(monthly_fee, period_start, period_end)

    return ProrationQuote(
        monthly_fee=monthly_fee,
        period_start=period_start,
        period_end=period_end,
        days_in_month=days_in_month(period_start),
        days_stayed=(period_end - period_start).days + 1,
        amount=amount
    )


@router.get("/checkout-deduction")
async def quote_checkout_deduction(
    monthly_fee: Decimal = Query(..., ge=0),
    percentage: Decimal = Query(...),
    checkout_duration: int = Query(..., description="Checkout duration in days"),
    current_user: dict = Depends(get_current_user)
):
    """Deduction a checkout of the given length would incur."""
    deducted = checkout_deduction(monthly_fee, percentage, checkout_duration)
    return {
        "monthly_fee": str(monthly_fee),
        "percentage": str(percentage),
        "checkout_duration": checkout_duration,
        "deducted_amount": str(deducted)
    }
