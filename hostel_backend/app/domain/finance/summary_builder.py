"""
Balance Summary Builder (Domain Logic).

Recomputes a resident's balance from every ledger source on each call.
Read-only: never writes to the session it is given.
"""

import logging
from decimal import Decimal
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_backend.app.domain.finance.capabilities import LedgerCapabilities
from hostel_backend.app.domain.finance.money import ZERO, last_non_null, round_money, sum_money
from hostel_backend.app.domain.finance.resident_directory import ResidentDirectory, ResidentProfile
from hostel_backend.app.domain.finance.results import (
    BalanceSummary, SummaryError, SummaryErrorKind, SummaryResult
)
from hostel_backend.app.models.checkout_financial import CheckoutFinancial
from hostel_backend.app.models.enums import ResidentType
from hostel_backend.app.models.income import Income
from hostel_backend.app.models.ledger_enums import BalanceType, SummaryStatus
from hostel_backend.app.models.resident_financial import ResidentFinancial

logger = logging.getLogger("hostel.finance")


class BalanceSummaryBuilder:

    def __init__(self, capabilities: LedgerCapabilities, directory: Optional[ResidentDirectory] = None):
        self.capabilities = capabilities
        self.directory = directory or ResidentDirectory()

    async def compute(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> SummaryResult:
        """
        Build the balance summary for one resident.

        Flow:
        1. Resolve the resident in the directory
        2. Sum ``due`` financial records and take the last monthly fee
        3. Sum checkout deductions
        4. Sum payments received
        5. Clamp the remaining balance at zero and derive the status

        Returns:
            BalanceSummary, or SummaryError if the resident is unknown or
            the ledger could not be read.
        """
        try:
            profile = await self.directory.get_profile(db, resident_type, resident_id)
            if profile is None:
                logger.warning(
                    "Financial summary requested for unknown resident",
                    extra={"resident_type": resident_type.value, "resident_id": resident_id}
                )
                return SummaryError(
                    resident_type=resident_type,
                    resident_id=resident_id,
                    kind=SummaryErrorKind.NOT_FOUND,
                    message=f"{resident_type.value.capitalize()} {resident_id} not found",
                )

            records = await self.financial_records(db, resident_type, resident_id)
            deducted = await self.checkout_deductions(db, resident_type, resident_id)
            paid = await self.payments_received(db, resident_type, resident_id)

            return self._assemble(profile, records, deducted, paid)

        except (SQLAlchemyError, ArithmeticError) as exc:
            logger.error(
                "Financial summary calculation error: %s", exc,
                extra={"resident_type": resident_type.value, "resident_id": resident_id}
            )
            return SummaryError(
                resident_type=resident_type,
                resident_id=resident_id,
                kind=SummaryErrorKind.COMPUTATION_FAILED,
                message="Failed to calculate financial summary",
            )

    async def build_summary(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> BalanceSummary:
        """Like ``compute`` but always returns a summary, zeroed on failure."""
        result = await self.compute(db, resident_type, resident_id)
        if isinstance(result, SummaryError):
            return BalanceSummary.degraded(result)
        return result

    async def financial_records(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> List[ResidentFinancial]:
        """Registration records in insertion order; empty if the source is off."""
        if not self.capabilities.financial_records_enabled(resident_type):
            return []

        result = await db.execute(
            select(ResidentFinancial).where(
                ResidentFinancial.resident_type == resident_type,
                ResidentFinancial.resident_id == resident_id
            ).order_by(ResidentFinancial.id)
        )
        return list(result.scalars().all())

    async def checkout_deductions(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> Decimal:
        if not self.capabilities.checkout_ledger_enabled:
            return ZERO

        result = await db.execute(
            select(CheckoutFinancial.deducted_amount).where(
                CheckoutFinancial.resident_type == resident_type,
                CheckoutFinancial.resident_id == resident_id
            )
        )
        return sum_money(result.scalars().all())

    async def payments_received(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> Decimal:
        if not self.capabilities.income_ledger_enabled:
            return ZERO

        result = await db.execute(
            select(Income.received_amount).where(
                Income.resident_type == resident_type,
                Income.resident_id == resident_id
            )
        )
        return sum_money(result.scalars().all())

    async def resolve_monthly_fee(
        self,
        db: AsyncSession,
        profile: ResidentProfile
    ) -> Decimal:
        """Current monthly rate for a resident already found in the directory."""
        records = await self.financial_records(db, profile.resident_type, profile.resident_id)
        return self.monthly_fee_from(records, profile)

    @staticmethod
    def monthly_fee_from(records: List[ResidentFinancial], profile: ResidentProfile) -> Decimal:
        """
        Last non-null ``monthly_fee`` across the records wins.

        Falls back to the directory rate when no record carries a fee.
        """
        fee = last_non_null(record.monthly_fee for record in records)
        if fee is None:
            fee = profile.monthly_rate
        if fee is None:
            return ZERO
        return round_money(fee)

    def _assemble(
        self,
        profile: ResidentProfile,
        records: List[ResidentFinancial],
        deducted: Decimal,
        paid: Decimal
    ) -> BalanceSummary:
        total_owed = sum_money(
            record.amount for record in records
            if record.balance_type == BalanceType.DUE
        )
        remaining = total_owed - paid - deducted

        return BalanceSummary(
            resident_type=profile.resident_type,
            resident_id=profile.resident_id,
            resident_name=profile.name,
            monthly_fee=self.monthly_fee_from(records, profile),
            total_amount=total_owed,
            deducted_amount=deducted,
            paid_amount=paid,
            remaining_balance=max(ZERO, round_money(remaining)),
            status=SummaryStatus.PAID if remaining <= 0 else SummaryStatus.PENDING,
        )
