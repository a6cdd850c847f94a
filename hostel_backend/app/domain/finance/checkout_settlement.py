"""
Checkout Settlement Service (Domain Logic).

Turns a completed checkout into a deduction on the resident's ledger.
Each checkout is settled at most once.
"""

import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Dict, List, Optional

from sqlalchemy import select, desc
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_backend.app.core.exceptions import (
    DuplicateCheckoutError, InvalidRangeError, LedgerDisabledError, ResourceNotFoundError
)
from hostel_backend.app.domain.finance.calculators import checkout_deduction
from hostel_backend.app.domain.finance.checkout_rule_resolver import CheckoutRuleResolver, tenure_days
from hostel_backend.app.domain.finance.money import MoneyLike, ZERO, round_money, sum_money, to_decimal
from hostel_backend.app.domain.finance.results import BalanceSummary
from hostel_backend.app.domain.finance.summary_builder import BalanceSummaryBuilder
from hostel_backend.app.models.checkout_financial import CheckoutFinancial
from hostel_backend.app.models.checkout_rule import CheckoutRule
from hostel_backend.app.models.enums import ResidentType

logger = logging.getLogger("hostel.finance")

# Upper bounds are inclusive
DEDUCTION_RANGES = (
    ("0-100", Decimal("100")),
    ("101-500", Decimal("500")),
    ("501-1000", Decimal("1000")),
    ("1001-2000", Decimal("2000")),
)
OPEN_DEDUCTION_RANGE = "2000+"
TOP_RESIDENTS_LIMIT = 10


def deduction_range(amount: MoneyLike) -> str:
    """Label of the bucket a deducted amount falls in."""
    value = to_decimal(amount)
    for label, upper in DEDUCTION_RANGES:
        if value <= upper:
            return label
    return OPEN_DEDUCTION_RANGE


@dataclass(frozen=True)
class CheckoutSettlement:
    checkout: CheckoutFinancial
    rule: Optional[CheckoutRule]
    percentage: Decimal
    monthly_fee: Decimal
    tenure_days: Optional[int]
    summary: BalanceSummary


@dataclass(frozen=True)
class CheckoutHistory:
    checkouts: List[CheckoutFinancial]
    total_deducted: Decimal
    total_checkouts: int
    average_deduction: Decimal


@dataclass(frozen=True)
class MonthlyDeductions:
    month: str  # YYYY-MM
    total_deducted: Decimal
    checkout_count: int
    unique_residents: int


@dataclass(frozen=True)
class ResidentDeductions:
    resident_id: int
    resident_name: str
    total_deducted: Decimal
    checkout_count: int


@dataclass(frozen=True)
class CheckoutStatistics:
    resident_type: ResidentType
    start_date: date
    end_date: date
    total_deducted: Decimal
    total_checkouts: int
    average_deduction: Decimal
    unique_residents: int
    by_month: List[MonthlyDeductions]
    top_residents: List[ResidentDeductions]
    deduction_ranges: Dict[str, int]


class CheckoutSettlementService:

    def __init__(self, builder: BalanceSummaryBuilder, student_rules_enabled: bool = False):
        self.builder = builder
        self.student_rules_enabled = student_rules_enabled

    def uses_rules(self, resident_type: ResidentType, use_rules: Optional[bool] = None) -> bool:
        """
        Whether a checkout resolves a configured rule.

        Staff always do. Students settle with a bare percentage unless the
        caller asks for rules or the deployment turns them on.
        """
        if use_rules is not None:
            return use_rules
        return resident_type == ResidentType.STAFF or self.student_rules_enabled

    async def settle(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int,
        checkout_id: int,
        checkout_duration_days: int,
        checkout_date: Optional[date] = None,
        percentage: Optional[MoneyLike] = None,
        use_rules: Optional[bool] = None
    ) -> CheckoutSettlement:
        """
        Record the deduction for a completed checkout.

        Flow:
        1. Resolve the resident and the monthly fee
        2. Idempotency check (existing CheckoutFinancial for this checkout)
        3. Pick the percentage: resolved rule, or the one given
        4. Calculate the deduction
        5. Append the CheckoutFinancial and rebuild the summary

        Raises:
            LedgerDisabledError: If the checkout ledger is off.
            ResourceNotFoundError: If the resident is unknown.
            DuplicateCheckoutError: If the checkout was already settled.
            InvalidDurationError: If the duration is negative.
        """
        if not self.builder.capabilities.checkout_ledger_enabled:
            raise LedgerDisabledError("checkout")

        profile = await self.builder.directory.get_profile(db, resident_type, resident_id)
        if profile is None:
            raise ResourceNotFoundError(resident_type.value.capitalize(), resident_id)

        existing = await db.execute(
            select(CheckoutFinancial.id).where(
                CheckoutFinancial.resident_type == resident_type,
                CheckoutFinancial.checkout_id == checkout_id
            )
        )
        if existing.scalar_one_or_none() is not None:
            raise DuplicateCheckoutError(checkout_id)

        checkout_date = checkout_date or date.today()
        monthly_fee = await self.builder.resolve_monthly_fee(db, profile)

        rule = None
        elapsed = None
        if self.uses_rules(resident_type, use_rules):
            elapsed = tenure_days(profile.joining_date, checkout_date)
            rule = await CheckoutRuleResolver.resolve(db, resident_type, resident_id, elapsed)
            applied_percentage = to_decimal(rule.percentage) if rule else ZERO
        else:
            applied_percentage = to_decimal(percentage) if percentage is not None else ZERO

        deducted = checkout_deduction(monthly_fee, applied_percentage, checkout_duration_days)

        checkout = CheckoutFinancial(
            resident_type=resident_type,
            resident_id=resident_id,
            checkout_id=checkout_id,
            checkout_date=checkout_date,
            checkout_duration=checkout_duration_days,
            deducted_amount=deducted,
            checkout_rule_id=rule.id if rule else None,
        )
        db.add(checkout)

        try:
            await db.flush()
        except IntegrityError:
            await db.rollback()
            raise DuplicateCheckoutError(checkout_id)

        summary = await self.builder.build_summary(db, resident_type, resident_id)
        await db.commit()
        await db.refresh(checkout)

        logger.info(
            "Checkout settled",
            extra={
                "resident_type": resident_type.value,
                "resident_id": resident_id,
                "checkout_id": checkout_id,
                "deducted_amount": str(deducted),
                "checkout_rule_id": checkout.checkout_rule_id,
            }
        )

        return CheckoutSettlement(
            checkout=checkout,
            rule=rule,
            percentage=applied_percentage,
            monthly_fee=monthly_fee,
            tenure_days=elapsed,
            summary=summary,
        )

    async def checkout_history(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> CheckoutHistory:
        """Settled checkouts for a resident, newest first, with totals."""
        if not await self.builder.directory.resident_exists(db, resident_type, resident_id):
            raise ResourceNotFoundError(resident_type.value.capitalize(), resident_id)

        checkouts: List[CheckoutFinancial] = []
        if self.builder.capabilities.checkout_ledger_enabled:
            result = await db.execute(
                select(CheckoutFinancial).where(
                    CheckoutFinancial.resident_type == resident_type,
                    CheckoutFinancial.resident_id == resident_id
                ).order_by(desc(CheckoutFinancial.id))
            )
            checkouts = list(result.scalars().all())

        total = sum_money(checkout.deducted_amount for checkout in checkouts)
        average = round_money(total / len(checkouts)) if checkouts else ZERO

        return CheckoutHistory(
            checkouts=checkouts,
            total_deducted=total,
            total_checkouts=len(checkouts),
            average_deduction=average,
        )

    async def checkout_statistics(
        self,
        db: AsyncSession,
        resident_type: ResidentType,
        start_date: date,
        end_date: date
    ) -> CheckoutStatistics:
        """
        Deduction statistics for checkouts dated within a period (inclusive).

        Breaks the period down by month, lists the residents with the highest
        total deductions and counts checkouts per deduction range.

        Raises:
            InvalidRangeError: If ``end_date`` is before ``start_date``.
        """
        if end_date < start_date:
            raise InvalidRangeError(start_date, end_date)

        checkouts: List[CheckoutFinancial] = []
        if self.builder.capabilities.checkout_ledger_enabled:
            result = await db.execute(
                select(CheckoutFinancial).where(
                    CheckoutFinancial.resident_type == resident_type,
                    CheckoutFinancial.checkout_date >= start_date,
                    CheckoutFinancial.checkout_date <= end_date
                ).order_by(CheckoutFinancial.checkout_date, CheckoutFinancial.id)
            )
            checkouts = list(result.scalars().all())

        months: Dict[str, List[CheckoutFinancial]] = {}
        per_resident: Dict[int, List[CheckoutFinancial]] = {}
        ranges = {label: 0 for label, _ in DEDUCTION_RANGES}
        ranges[OPEN_DEDUCTION_RANGE] = 0

        for checkout in checkouts:
            months.setdefault(checkout.checkout_date.strftime("%Y-%m"), []).append(checkout)
            per_resident.setdefault(checkout.resident_id, []).append(checkout)
            ranges[deduction_range(checkout.deducted_amount)] += 1

        by_month = [
            MonthlyDeductions(
                month=month,
                total_deducted=sum_money(c.deducted_amount for c in group),
                checkout_count=len(group),
                unique_residents=len({c.resident_id for c in group}),
            )
            for month, group in sorted(months.items())
        ]

        resident_totals = sorted(
            (
                (resident_id, sum_money(c.deducted_amount for c in group), len(group))
                for resident_id, group in per_resident.items()
            ),
            key=lambda item: (-item[1], item[0])
        )[:TOP_RESIDENTS_LIMIT]

        top_residents = []
        for resident_id, deducted, count in resident_totals:
            profile = await self.builder.directory.get_profile(db, resident_type, resident_id)
            top_residents.append(ResidentDeductions(
                resident_id=resident_id,
                resident_name=profile.name if profile else "Unknown",
                total_deducted=deducted,
                checkout_count=count,
            ))

        total = sum_money(c.deducted_amount for c in checkouts)

        return CheckoutStatistics(
            resident_type=resident_type,
            start_date=start_date,
            end_date=end_date,
            total_deducted=total,
            total_checkouts=len(checkouts),
            average_deduction=round_money(total / len(checkouts)) if checkouts else ZERO,
            unique_residents=len(per_resident),
            by_month=by_month,
            top_residents=top_residents,
            deduction_ranges=ranges,
        )
