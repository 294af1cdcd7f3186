"""Unit tests for interest quotes and daily accrual"""

import pytest
from datetime import date, timedelta
from decimal import Decimal
from rcard_gateway.domain.interest import accrued_interest, preview_interest, round_money, simple_interest
from rcard_gateway.domain.models import LOAN_ACTIVE, LOAN_PAID, Loan


def _loan(principal="500", interest="0", rate="10", status=LOAN_ACTIVE, last_calc=date(2024, 3, 1)) -> Loan:
    return Loan(
        id="loan_test",
        user_id=1,
        card_id="gold-credit",
        principal=Decimal(principal),
        original_principal=Decimal(principal),
        interest_rate_monthly=Decimal(rate),
        interest_accrued=Decimal(interest),
        created_at=date(2024, 3, 1),
        due_date=date(2024, 3, 11),
        status=status,
        last_interest_calc=last_calc,
        days_duration=10,
    )


def test_preview_interest_ten_days_at_ten_percent():
    """500 at 10%/month for 10 days: 16.67 interest, 516.67 total"""
    preview = preview_interest(Decimal(500), Decimal(10), days=10, min_days=5)

    assert preview.effective_days == 10
    assert preview.interest_amount == Decimal("16.67")
    assert preview.total_due == Decimal("516.67")


def test_preview_interest_applies_minimum_days():
    """Short loans are charged for the policy minimum"""
    preview = preview_interest(Decimal(300), Decimal(15), days=2, min_days=5)

    assert preview.days == 2
    assert preview.effective_days == 5
    # 300 * 0.15/30 * 5 = 7.50
    assert preview.interest_amount == Decimal("7.50")
    assert preview.total_due == Decimal("307.50")


def test_preview_interest_zero_rate():
    preview = preview_interest(Decimal(250), Decimal(0), days=30, min_days=5)

    assert preview.interest_amount == Decimal("0.00")
    assert preview.total_due == Decimal("250.00")


def test_preview_interest_daily_rate_percent():
    preview = preview_interest(Decimal(100), Decimal(12), days=10, min_days=5)

    assert preview.daily_rate_percent == Decimal("0.4")


def test_preview_interest_monotonic_in_days():
    """More days never cost less"""
    totals = [
        preview_interest(Decimal(777), Decimal(9), days=days, min_days=5).total_due
        for days in range(1, 61)
    ]

    assert totals == sorted(totals)


def test_preview_interest_monotonic_in_rate():
    """A higher monthly rate never costs less"""
    rates = [Decimal(tenths) / 10 for tenths in range(0, 301, 5)]
    totals = [
        preview_interest(Decimal(777), rate, days=14, min_days=5).total_due
        for rate in rates
    ]

    assert totals == sorted(totals)
    assert totals[0] == Decimal("777.00")


def test_round_money_half_up():
    assert round_money(Decimal("0.005")) == Decimal("0.01")
    assert round_money(Decimal("16.665")) == Decimal("16.67")
    assert round_money(Decimal("16.664999")) == Decimal("16.66")


def test_simple_interest_uses_thirty_day_month():
    assert simple_interest(Decimal(100), Decimal(30), 1) == Decimal(1)


def test_simple_interest_whole_results_stay_exact():
    # 600 * 0.1/30 * 3 = 6, with no 28-digit residue
    assert simple_interest(Decimal(600), Decimal(10), 3) == Decimal(6)


def test_accrued_interest_same_day_returns_stored():
    loan = _loan(interest="3.25")

    assert accrued_interest(loan, date(2024, 3, 1)) == Decimal("3.25")


def test_accrued_interest_adds_elapsed_days():
    loan = _loan(principal="600", rate="10", interest="1")

    assert accrued_interest(loan, date(2024, 3, 4)) == Decimal(7)


def test_accrued_interest_ignores_minimum_days():
    """Accrual counts actual elapsed days, not the quote's floor"""
    loan = _loan(principal="300", rate="30")

    assert accrued_interest(loan, date(2024, 3, 2)) == Decimal("3")


def test_accrued_interest_kept_at_storage_scale():
    """Sub-cent interest survives, but only to the 8 places a Money column holds"""
    loan = _loan(principal="500", rate="10")

    interest = accrued_interest(loan, date(2024, 3, 11))

    assert interest == Decimal("16.66666667")
    assert round_money(interest) == Decimal("16.67")


def test_accrued_interest_frozen_once_paid():
    loan = _loan(interest="16.67", status=LOAN_PAID)

    assert accrued_interest(loan, date(2024, 12, 31)) == Decimal("16.67")


@pytest.mark.parametrize("offset", [1, 7, 45])
def test_accrued_interest_counts_absolute_days(offset):
    """A calculation date after today still accrues by distance"""
    start = date(2024, 3, 1)
    forward = accrued_interest(_loan(last_calc=start), start + timedelta(days=offset))
    backward = accrued_interest(_loan(last_calc=start + timedelta(days=offset)), start)

    assert forward == backward
