"""Interest engine - daily accrual and loan quotes"""

from datetime import date
from decimal import Decimal, ROUND_HALF_UP

from rcard_gateway.domain.models import InterestPreview, Loan
from rcard_gateway.utils.date_utils import days_between

CENT = Decimal("0.01")
# Scale of the Money columns; accrued interest never carries more digits than storage keeps
STORAGE_UNIT = Decimal("0.00000001")
DAYS_PER_MONTH = Decimal(30)  # fixed 30-day month, not calendar-accurate


def round_money(amount: Decimal) -> Decimal:
    """Round half-up to cents"""
    return Decimal(amount).quantize(CENT, rounding=ROUND_HALF_UP)


def to_storage_scale(amount: Decimal) -> Decimal:
    return Decimal(amount).quantize(STORAGE_UNIT, rounding=ROUND_HALF_UP)


def simple_interest(principal: Decimal, interest_rate_monthly: Decimal, days: int) -> Decimal:
    """
    principal * (monthly rate / 30 / 100) * days, unrounded.

    Multiplied out before the single division so whole-number results stay exact.
    """
    return Decimal(principal) * Decimal(interest_rate_monthly) * days / (DAYS_PER_MONTH * 100)


def preview_interest(
    principal: Decimal,
    interest_rate_monthly: Decimal,
    days: int,
    min_days: int,
) -> InterestPreview:
    """
    Quote interest for a prospective loan.

    Requirements:
    - Interest is charged for at least min_days
    - Daily rate = monthly rate / 30 / 100
    - Interest and total are rounded half-up to cents

    Example:
        500 at 10%/month for 10 days (min 5)
        500 * 0.1/30 * 10 = 16.666... -> 16.67, total 516.67
    """
    principal = Decimal(principal)
    interest_rate_monthly = Decimal(interest_rate_monthly)
    effective_days = max(days, min_days)

    interest_amount = round_money(simple_interest(principal, interest_rate_monthly, effective_days))

    return InterestPreview(
        principal=principal,
        interest_rate_monthly=interest_rate_monthly,
        days=days,
        min_days=min_days,
        effective_days=effective_days,
        daily_rate_percent=interest_rate_monthly / DAYS_PER_MONTH,
        interest_amount=interest_amount,
        total_due=round_money(principal + interest_amount),
    )


def accrued_interest(loan: Loan, today: date) -> Decimal:
    """
    Interest owed on a loan as of today, at storage scale.

    Paid loans are frozen at their stored interest. Active loans add simple
    daily interest on the outstanding principal for every calendar day since
    the last calculation. The minimum-days floor of the quote is not applied here.
    """
    if not loan.is_active:
        return loan.interest_accrued

    days_elapsed = days_between(loan.last_interest_calc, today)
    if days_elapsed == 0:
        return loan.interest_accrued

    new_interest = simple_interest(loan.principal, loan.interest_rate_monthly, days_elapsed)
    return to_storage_scale(loan.interest_accrued + new_interest)
