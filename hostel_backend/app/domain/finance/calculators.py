"""
Fee calculators.

Pure functions; bad input raises a FinanceValidationError straight to the
caller.
"""

import calendar
from datetime import date
from decimal import Decimal

from hostel_backend.app.core.exceptions import InvalidRangeError, InvalidDurationError
from hostel_backend.app.domain.finance.money import MoneyLike, round_money, to_decimal

# Checkout deductions always use a 30-day month, unlike proration.
DEDUCTION_DAYS_PER_MONTH = 30


def days_in_month(day: date) -> int:
    return calendar.monthrange(day.year, day.month)[1]


def prorate(monthly_fee: MoneyLike, period_start: date, period_end: date) -> Decimal:
    """
    Charge for a partial-month stay.

    The daily rate comes from the number of days in ``period_start``'s
    month. Both endpoints are billed, so a same-day stay bills one day.

    Raises:
        InvalidRangeError: If ``period_end`` is before ``period_start``.
    """
    if period_end < period_start:
        raise InvalidRangeError(period_start, period_end)

    days_stayed = (period_end - period_start).days + 1
    daily_fee = to_decimal(monthly_fee) / days_in_month(period_start)
    return round_money(daily_fee * days_stayed)


def checkout_deduction(monthly_fee: MoneyLike, percentage: MoneyLike, checkout_duration_days: int) -> Decimal:
    """
    Deduction for a checkout lasting ``checkout_duration_days``.

    ``percentage`` is a plain 0-100 number and is not clamped here.

    Raises:
        InvalidDurationError: If the duration is negative.
    """
    if checkout_duration_days < 0:
        raise InvalidDurationError(checkout_duration_days)

    daily_fee = to_decimal(monthly_fee) / DEDUCTION_DAYS_PER_MONTH
    return round_money(daily_fee * checkout_duration_days * to_decimal(percentage) / 100)
