"""
Result types for the balance summary and payment services.

Failures while aggregating a resident's ledger are values, not exceptions:
callers branch on ``SummaryError``/``PaymentError`` or use
``BalanceSummary.degraded`` to get a zeroed summary that is safe to show.
"""

import enum
from dataclasses import dataclass, asdict
from decimal import Decimal
from typing import Any, Dict, Optional, Union

from hostel_backend.app.domain.finance.money import ZERO
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.ledger_enums import SummaryStatus


class SummaryErrorKind(str, enum.Enum):
    NOT_FOUND = "NOT_FOUND"
    COMPUTATION_FAILED = "COMPUTATION_FAILED"


@dataclass(frozen=True)
class SummaryError:
    resident_type: ResidentType
    resident_id: int
    kind: SummaryErrorKind
    message: str
    resident_name: Optional[str] = None


@dataclass(frozen=True)
class BalanceSummary:
    resident_type: ResidentType
    resident_id: int
    resident_name: str
    monthly_fee: Decimal
    total_amount: Decimal
    deducted_amount: Decimal
    paid_amount: Decimal
    remaining_balance: Decimal
    status: SummaryStatus
    error: Optional[str] = None

    @classmethod
    def degraded(cls, failure: SummaryError) -> "BalanceSummary":
        """Zeroed summary tagged with ``status='error'``."""
        return cls(
            resident_type=failure.resident_type,
            resident_id=failure.resident_id,
            resident_name=failure.resident_name or "Unknown",
            monthly_fee=ZERO,
            total_amount=ZERO,
            deducted_amount=ZERO,
            paid_amount=ZERO,
            remaining_balance=ZERO,
            status=SummaryStatus.ERROR,
            error=failure.message,
        )

    @property
    def is_error(self) -> bool:
        return self.status == SummaryStatus.ERROR

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PaymentError:
    error: str
    message: str


SummaryResult = Union[BalanceSummary, SummaryError]
PaymentResult = Union[BalanceSummary, PaymentError]
