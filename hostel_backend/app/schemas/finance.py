"""
Finance Schemas.
"""

from pydantic import BaseModel, Field
from datetime import date, datetime, timezone
from decimal import Decimal
from typing import Optional
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.ledger_enums import BalanceType, PaymentStatus, SummaryStatus
from hostel_backend.app.domain.finance.results import BalanceSummary


class BalanceSummaryResponse(BaseModel):
    """Schema for displaying a resident's balance summary."""
    resident_type: ResidentType
    resident_id: int
    resident_name: str
    monthly_fee: Decimal
    total_amount: Decimal
    deducted_amount: Decimal
    paid_amount: Decimal
    remaining_balance: Decimal
    status: SummaryStatus
    last_updated: datetime
    error: Optional[str] = None

    @classmethod
    def from_summary(cls, summary: BalanceSummary) -> "BalanceSummaryResponse":
        return cls(**summary.as_dict(), last_updated=datetime.now(timezone.utc))


class PaymentCreate(BaseModel):
    """Schema for recording a payment."""
    amount: Decimal = Field(..., gt=0, max_digits=10, decimal_places=2)
    payment_type: Optional[str] = Field(None, min_length=1, max_length=50)
    remark: Optional[str] = Field(None, max_length=500)


class PaymentErrorResponse(BaseModel):
    """Returned instead of a summary when a payment could not be recorded."""
    error: str
    message: str


class FinancialRecordCreate(BaseModel):
    """Schema for a registration/update-time financial record."""
    amount: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    balance_type: Optional[BalanceType] = None
    monthly_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    admission_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    form_fee: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    security_deposit: Optional[Decimal] = Field(None, ge=0, max_digits=10, decimal_places=2)
    previous_balance: Optional[Decimal] = Field(None, max_digits=10, decimal_places=2)
    payment_date: date
    joining_date: Optional[date] = None
    remark: Optional[str] = None


class FinancialRecordResponse(BaseModel):
    """Schema for displaying a financial record."""
    id: int
    resident_type: ResidentType
    resident_id: int
    amount: Decimal
    balance_type: Optional[BalanceType]
    monthly_fee: Optional[Decimal]
    admission_fee: Optional[Decimal]
    form_fee: Optional[Decimal]
    security_deposit: Optional[Decimal]
    previous_balance: Optional[Decimal]
    payment_date: date
    joining_date: Optional[date]
    remark: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class ProrationQuote(BaseModel):
    """Prorated charge for a partial-month stay."""
    monthly_fee: Decimal
    period_start: date
    period_end: date
    days_in_month: int
    days_stayed: int
    amount: Decimal


class IncomeResponse(BaseModel):
    """Schema for displaying a recorded payment."""
    id: int
    resident_type: ResidentType
    resident_id: int
    amount: Decimal
    received_amount: Decimal
    due_amount: Decimal
    income_date: date
    payment_type: str
    payment_status: PaymentStatus
    remark: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True
