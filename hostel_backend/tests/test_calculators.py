"""
Fee calculator and money helper tests.
"""

import pytest
from datetime import date
from decimal import Decimal

from hostel_backend.app.core.exceptions import InvalidRangeError, InvalidDurationError
from hostel_backend.app.domain.finance.calculators import prorate, checkout_deduction, days_in_month
from hostel_backend.app.domain.finance.money import round_money, sum_money, last_non_null, to_decimal


def test_days_in_month_handles_leap_years():
    assert days_in_month(date(2024, 2, 10)) == 29
    assert days_in_month(date(2023, 2, 10)) == 28
    assert days_in_month(date(2024, 4, 1)) == 30


def test_prorate_full_leap_february_bills_whole_fee():
    assert prorate(Decimal("3000"), date(2024, 2, 1), date(2024, 2, 29)) == Decimal("3000.00")


def test_prorate_same_day_bills_one_day():
    # 3100 / 31 days
    assert prorate(Decimal("3100"), date(2024, 1, 15), date(2024, 1, 15)) == Decimal("100.00")


def test_prorate_partial_month():
    # 3000 / 30 * 16 days (Apr 15..30 inclusive)
    assert prorate(Decimal("3000"), date(2024, 4, 15), date(2024, 4, 30)) == Decimal("1600.00")


def test_prorate_uses_start_month_length_across_month_boundary():
    # Jan has 31 days; Jan 30..Feb 2 is 4 days
    assert prorate(Decimal("3100"), date(2024, 1, 30), date(2024, 2, 2)) == Decimal("400.00")


def test_prorate_rounds_half_up():
    # 1000 / 31 = 32.258...
    assert prorate(1000, date(2024, 1, 1), date(2024, 1, 1)) == Decimal("32.26")


def test_prorate_rejects_inverted_range():
    with pytest.raises(InvalidRangeError) as exc_info:
        prorate(Decimal("3000"), date(2024, 2, 10), date(2024, 2, 9))

    assert exc_info.value.status_code == 422
    assert exc_info.value.details["period_start"] == "2024-02-10"


def test_checkout_deduction_uses_thirty_day_month():
    assert checkout_deduction(Decimal("3000"), Decimal("50"), 15) == Decimal("750.00")


def test_checkout_deduction_zero_duration_is_zero():
    assert checkout_deduction(Decimal("3000"), Decimal("50"), 0) == Decimal("0.00")


def test_checkout_deduction_zero_percentage_is_zero():
    assert checkout_deduction(Decimal("3000"), 0, 10) == Decimal("0.00")


def test_checkout_deduction_rounds_half_up():
    # 0.30 / 30 * 1 * 50% = 0.005
    assert checkout_deduction(Decimal("0.30"), Decimal("50"), 1) == Decimal("0.01")


def test_checkout_deduction_does_not_clamp_percentage():
    assert checkout_deduction(Decimal("3000"), Decimal("150"), 30) == Decimal("4500.00")


def test_checkout_deduction_rejects_negative_duration():
    with pytest.raises(InvalidDurationError) as exc_info:
        checkout_deduction(Decimal("3000"), Decimal("50"), -1)

    assert exc_info.value.error_code == "ERR_FIN_VALIDATION"


def test_to_decimal_avoids_float_noise():
    assert to_decimal(0.1) == Decimal("0.1")


def test_round_money_half_up():
    assert round_money(Decimal("2.345")) == Decimal("2.35")
    assert round_money(Decimal("2.344")) == Decimal("2.34")


def test_sum_money_skips_nulls():
    assert sum_money([Decimal("10.50"), None, 4, "0.25"]) == Decimal("14.75")
    assert sum_money([]) == Decimal("0.00")


def test_last_non_null_keeps_latest_value():
    assert last_non_null([Decimal("100"), None, Decimal("200"), None]) == Decimal("200")
    assert last_non_null([None, None]) is None
    assert last_non_null([]) is None
