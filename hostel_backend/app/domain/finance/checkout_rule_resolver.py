"""
Checkout Rule Resolver.

Responsible for determining the deduction rule that applies to a resident
at checkout.
Follows priority:
1. Active rules scoped to the resident
2. Active default rules for the resident's type (only if the resident has none)

Within the chosen scope the tier with the highest ``active_after_days``
not exceeding the resident's tenure wins.
"""

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable, List, Optional

from sqlalchemy import select, or_
from sqlalchemy.ext.asyncio import AsyncSession

from hostel_backend.app.domain.finance.calculators import DEDUCTION_DAYS_PER_MONTH
from hostel_backend.app.domain.finance.money import MoneyLike, round_money, to_decimal
from hostel_backend.app.models.checkout_rule import CheckoutRule
from hostel_backend.app.models.enums import ResidentType

PREVIEW_HOURS = (1, 2, 4, 8, 12, 24)


def tenure_days(joining_date: Optional[date], on_date: date) -> int:
    """Whole days since joining; 0 when unknown or in the future."""
    if joining_date is None:
        return 0
    return max(0, (on_date - joining_date).days)


def select_rule(rules: Iterable[CheckoutRule], elapsed_days: int) -> Optional[CheckoutRule]:
    """
    Pick the applicable rule from a set already scoped to one resident.

    Inactive rules and rules whose threshold is above ``elapsed_days`` are
    ignored. Equal thresholds go to the newest rule.
    """
    eligible = [
        rule for rule in rules
        if rule.is_active and (rule.active_after_days or 0) <= elapsed_days
    ]
    if not eligible:
        return None
    return max(eligible, key=lambda rule: (rule.active_after_days or 0, rule.id or 0))


class CheckoutRuleResolver:

    @staticmethod
    async def load_rules(
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int
    ) -> List[CheckoutRule]:
        """
        Active rules in effect for a resident: their own if they have any,
        otherwise the defaults for their type.
        """
        query = select(CheckoutRule).where(
            CheckoutRule.resident_type == resident_type,
            CheckoutRule.is_active == True,
            or_(CheckoutRule.resident_id == resident_id, CheckoutRule.resident_id.is_(None))
        ).order_by(CheckoutRule.id)

        result = await db.execute(query)
        rules = list(result.scalars().all())

        own_rules = [rule for rule in rules if rule.resident_id == resident_id]
        if own_rules:
            return own_rules
        return [rule for rule in rules if rule.resident_id is None]

    @staticmethod
    async def resolve(
        db: AsyncSession,
        resident_type: ResidentType,
        resident_id: int,
        elapsed_days: int
    ) -> Optional[CheckoutRule]:
        """
        Find the rule for a resident with ``elapsed_days`` of tenure.

        Returns None when no rule applies, meaning no deduction.
        """
        rules = await CheckoutRuleResolver.load_rules(db, resident_type, resident_id)
        return select_rule(rules, elapsed_days)


@dataclass(frozen=True)
class DeductionExample:
    duration_hours: int
    deducted_amount: Decimal


@dataclass(frozen=True)
class RulePreview:
    rule: CheckoutRule
    monthly_fee: Decimal
    daily_rate: Decimal
    hourly_rate: Decimal
    examples: List[DeductionExample]


def preview_rule(rule: CheckoutRule, monthly_fee: MoneyLike) -> RulePreview:
    """Show what a rule would deduct for a few short checkout durations."""
    fee = to_decimal(monthly_fee)
    daily_rate = fee / DEDUCTION_DAYS_PER_MONTH
    hourly_rate = daily_rate / 24
    percentage = to_decimal(rule.percentage)

    examples = [
        DeductionExample(
            duration_hours=hours,
            deducted_amount=round_money(hourly_rate * hours * percentage / 100),
        )
        for hours in PREVIEW_HOURS
    ]

    return RulePreview(
        rule=rule,
        monthly_fee=round_money(fee),
        daily_rate=round_money(daily_rate),
        hourly_rate=round_money(hourly_rate),
        examples=examples,
    )
