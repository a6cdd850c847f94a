"""
Ledger capabilities.

Which optional ledger sources this deployment carries. Resolved once
from settings; a disabled source contributes zero to every summary.
"""

from dataclasses import dataclass

from hostel_backend.app.core.config import Settings, settings
from hostel_backend.app.models.enums import ResidentType


@dataclass(frozen=True)
class LedgerCapabilities:
    income_ledger_enabled: bool = True
    checkout_ledger_enabled: bool = True
    staff_financials_enabled: bool = True

    @classmethod
    def from_settings(cls, config: Settings) -> "LedgerCapabilities":
        return cls(
            income_ledger_enabled=config.income_ledger_enabled,
            checkout_ledger_enabled=config.checkout_ledger_enabled,
            staff_financials_enabled=config.staff_financials_enabled,
        )

    def financial_records_enabled(self, resident_type: ResidentType) -> bool:
        if resident_type == ResidentType.STAFF:
            return self.staff_financials_enabled
        return True


ledger_capabilities = LedgerCapabilities.from_settings(settings)
