"""
Ledger enumerations.
"""

import enum


class BalanceType(str, enum.Enum):
    """Sign of the balance recorded at registration."""
    DUE = "due"  # Resident owes this amount
    ADVANCE = "advance"  # Resident paid ahead


class PaymentStatus(str, enum.Enum):
    """Income entry payment status."""
    PAID = "paid"
    PARTIAL = "partial"
    UNPAID = "unpaid"


class SummaryStatus(str, enum.Enum):
    """Derived balance summary status."""
    PAID = "paid"  # Nothing left to pay
    PENDING = "pending"  # Balance outstanding
    ERROR = "error"  # Summary could not be computed
