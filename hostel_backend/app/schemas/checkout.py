"""
Checkout Schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime
from decimal import Decimal
from typing import Dict, Optional, List
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.schemas.finance import BalanceSummaryResponse


class CheckoutRuleCreate(BaseModel):
    """Schema for creating a checkout rule. Leave resident_id empty for a default rule."""
    resident_type: ResidentType
    resident_id: Optional[int] = Field(None, gt=0)
    is_active: bool = True
    active_after_days: int = Field(0, ge=0)
    percentage: Decimal = Field(..., ge=0, le=100, max_digits=5, decimal_places=2)


class CheckoutRuleUpdate(BaseModel):
    """Schema for updating a checkout rule."""
    is_active: Optional[bool] = None
    active_after_days: Optional[int] = Field(None, ge=0)
    percentage: Optional[Decimal] = Field(None, ge=0, le=100, max_digits=5, decimal_places=2)


class CheckoutRuleResponse(BaseModel):
    """Schema for displaying a checkout rule."""
    id: int
    resident_type: ResidentType
    resident_id: Optional[int]
    is_active: bool
    active_after_days: int
    percentage: Decimal
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class DeductionExampleResponse(BaseModel):
    duration_hours: int
    deducted_amount: Decimal

    class Config:
        from_attributes = True


class RulePreviewResponse(BaseModel):
    """What the applicable rule would deduct for short checkouts."""
    rule: CheckoutRuleResponse
    tenure_days: int
    monthly_fee: Decimal
    daily_rate: Decimal
    hourly_rate: Decimal
    examples: List[DeductionExampleResponse]


class RulePreviewEnvelope(BaseModel):
    status: str
    message: Optional[str] = None
    data: Optional[RulePreviewResponse] = None


class CheckoutSettleRequest(BaseModel):
    """Schema for settling a completed checkout."""
    checkout_id: int = Field(..., gt=0)
    checkout_duration: int = Field(..., ge=0, description="Checkout duration in days")
    checkout_date: Optional[date] = None
    percentage: Optional[Decimal] = Field(None, ge=0, le=100, max_digits=5, decimal_places=2)
    use_rules: Optional[bool] = None


class CheckoutFinancialResponse(BaseModel):
    """Schema for displaying a settled checkout."""
    id: int
    resident_type: ResidentType
    resident_id: int
    checkout_id: int
    checkout_date: date
    checkout_duration: int
    deducted_amount: Decimal
    checkout_rule_id: Optional[int]
    created_at: datetime

    class Config:
        from_attributes = True


class CheckoutSettlementResponse(BaseModel):
    checkout: CheckoutFinancialResponse
    percentage: Decimal
    monthly_fee: Decimal
    tenure_days: Optional[int]
    summary: BalanceSummaryResponse


class CheckoutHistoryResponse(BaseModel):
    checkouts: List[CheckoutFinancialResponse]
    total_deducted: Decimal
    total_checkouts: int
    average_deduction: Decimal


class MonthlyDeductionsResponse(BaseModel):
    month: str
    total_deducted: Decimal
    checkout_count: int
    unique_residents: int

    class Config:
        from_attributes = True


class ResidentDeductionsResponse(BaseModel):
    resident_id: int
    resident_name: str
    total_deducted: Decimal
    checkout_count: int

    class Config:
        from_attributes = True


class CheckoutStatisticsResponse(BaseModel):
    """Deduction statistics for one resident type over a period."""
    resident_type: ResidentType
    start_date: date
    end_date: date
    total_deducted: Decimal
    total_checkouts: int
    average_deduction: Decimal
    unique_residents: int
    by_month: List[MonthlyDeductionsResponse]
    top_residents: List[ResidentDeductionsResponse]
    deduction_ranges: Dict[str, int]

    class Config:
        from_attributes = True
