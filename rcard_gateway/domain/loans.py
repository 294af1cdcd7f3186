"""Loan lifecycle - creation, accrual refresh and repayment under card policy limits"""

import logging
import uuid
from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal
from typing import Callable, List, Optional

from rcard_gateway.domain.exceptions import (
    BelowMinimumDaysError,
    InsufficientFundsError,
    LoanNotActiveError,
    LoanNotFoundError,
    UserNotFoundError,
    ValidationError,
    YearlyLimitExceededError,
)
from rcard_gateway.domain.interest import accrued_interest, preview_interest, round_money
from rcard_gateway.domain.models import (
    CENTRAL_WALLET,
    LOAN_ACTIVE,
    LOAN_PAID,
    LOAN_STATUSES,
    Loan,
    LoanPreview,
    Policy,
    RepaymentResult,
    YearlyLimitUsage,
)
from rcard_gateway.domain.wallet import WalletLedger
from rcard_gateway.utils.date_utils import add_days, days_between, utc_now

logger = logging.getLogger(__name__)


def generate_loan_id() -> str:
    return f"loan_{uuid.uuid4().hex[:16]}"


def _require_positive(principal: Decimal, days: int) -> None:
    if principal <= 0 or days <= 0:
        raise ValidationError("Valid card_id, principal, and days required")


class LoanLifecycle:
    """
    Orchestrates the active -> paid state machine of a user's loans.

    Interest is recomputed lazily: reads never persist it, refresh_interest()
    and repay() do. Nothing here commits; the caller owns the unit of work so
    that a repayment's wallet debit and loan update land in one transaction.
    """

    def __init__(
        self,
        users,
        loans,
        wallet: WalletLedger,
        policy_lookup: Callable[[str], Policy],
        today: Callable[[], date] = date.today,
        now: Callable[[], datetime] = utc_now,
        count_original_principal: bool = False,
    ):
        self.users = users
        self.loans = loans
        self.wallet = wallet
        self.policy_lookup = policy_lookup
        self.today = today
        self.now = now
        self.count_original_principal = count_original_principal

    def yearly_total(self, user_id: int) -> Decimal:
        """
        Principal borrowed this calendar year across all of the user's loans.

        Counts every loan regardless of status or card. By default the current
        principal is used, so partial repayments lower the total.
        """
        year = self.today().year
        return sum(
            (
                loan.original_principal if self.count_original_principal else loan.principal
                for loan in self.loans.list_loans(user_id)
                if loan.created_at.year == year
            ),
            Decimal(0),
        )

    def preview(self, user_id: int, card_id: str, principal: Decimal, days: int) -> LoanPreview:
        """Quote a prospective loan and the user's remaining yearly allowance"""
        principal = Decimal(principal)
        _require_positive(principal, days)

        policy = self.policy_lookup(str(card_id))
        interest = preview_interest(principal, policy.interest_rate_monthly, days, policy.min_interest_days)

        used = self.yearly_total(user_id)
        remaining = policy.max_yearly_loans - used
        return LoanPreview(
            policy=policy,
            interest=interest,
            yearly_limit=YearlyLimitUsage(
                used=used,
                max=policy.max_yearly_loans,
                remaining=remaining,
                can_borrow=principal <= remaining,
            ),
        )

    def create(self, user_id: int, card_id: str, principal: Decimal, days: int) -> str:
        """
        Open a new active loan.

        Raises:
            ValidationError: principal or days not positive
            UserNotFoundError: unknown user
            BelowMinimumDaysError: days shorter than the policy minimum
            YearlyLimitExceededError: yearly total + principal over the policy cap
        """
        principal = Decimal(principal)
        _require_positive(principal, days)

        if self.users.get_user(user_id) is None:
            logger.error("Loan creation failed: user not found", extra={"user_id": user_id})
            raise UserNotFoundError(f"User {user_id} not found")

        policy = self.policy_lookup(str(card_id))

        if days < policy.min_interest_days:
            raise BelowMinimumDaysError(
                f"Loan duration of {days} days is below the minimum of {policy.min_interest_days}"
            )

        yearly_total = self.yearly_total(user_id)
        if yearly_total + principal > policy.max_yearly_loans:
            raise YearlyLimitExceededError(
                f"Loan would exceed yearly limit of {policy.max_yearly_loans} "
                f"(already borrowed {yearly_total})"
            )

        today = self.today()
        loan = Loan(
            id=generate_loan_id(),
            user_id=user_id,
            card_id=str(card_id),
            principal=principal,
            original_principal=principal,
            interest_rate_monthly=policy.interest_rate_monthly,
            interest_accrued=Decimal(0),
            created_at=today,
            due_date=add_days(today, days),
            status=LOAN_ACTIVE,
            last_interest_calc=today,
            days_duration=days,
        )
        self.loans.save_loan(loan)

        logger.info(
            "Loan created",
            extra={
                "loan_id": loan.id,
                "user_id": user_id,
                "card_id": loan.card_id,
                "policy_id": policy.id,
                "principal": str(principal),
                "days": days,
            },
        )
        return loan.id

    def _load(self, user_id: int, loan_id: str) -> Loan:
        loan = self.loans.get_loan(user_id, loan_id)
        if loan is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")
        return loan

    def get_current(self, user_id: int, loan_id: str) -> Loan:
        """Loan with interest accrued up to today (not persisted)"""
        loan = self._load(user_id, loan_id)
        return replace(loan, interest_accrued=accrued_interest(loan, self.today()))

    def list_current(self, user_id: int, status: Optional[str] = None) -> List[Loan]:
        """All of the user's loans, newest first, with interest accrued up to today"""
        if status is not None and status not in LOAN_STATUSES:
            raise ValidationError(f"Unknown loan status: {status}")

        today = self.today()
        return [
            replace(loan, interest_accrued=accrued_interest(loan, today))
            for loan in self.loans.list_loans(user_id, status)
        ]

    def refresh_interest(self, user_id: int, loan_id: str) -> Loan:
        """Persist accrued interest and move the calculation date to today"""
        loan = self._load(user_id, loan_id)
        if not loan.is_active:
            raise LoanNotActiveError(f"Loan {loan_id} is not active (status: {loan.status})")

        today = self.today()
        if days_between(loan.last_interest_calc, today) == 0:
            return loan

        loan.interest_accrued = accrued_interest(loan, today)
        loan.last_interest_calc = today
        self.loans.save_loan(loan)
        return loan

    def repay(self, user_id: int, loan_id: str, amount: Decimal) -> RepaymentResult:
        """
        Repay a loan from the user's central wallet.

        Allocation:
        - amount covering the total due settles the loan: status paid,
          principal kept as a record, interest frozen at the charged value
        - otherwise interest first, any excess reduces principal

        The bound check compares against the total due rounded to cents, so
        paying the displayed total settles the loan. Overpayment is rejected.
        """
        amount = Decimal(amount)

        # Lock the owner's row for the read-modify-write of wallet and loan
        if self.users.get_user(user_id, for_update=True) is None:
            raise LoanNotFoundError(f"Loan {loan_id} not found")

        loan = self._load(user_id, loan_id)
        if not loan.is_active:
            raise LoanNotActiveError(f"Loan {loan_id} is not active (status: {loan.status})")

        today = self.today()
        interest = accrued_interest(loan, today)
        exact_due = loan.principal + interest
        total_due = round_money(exact_due)

        if amount <= 0 or amount > total_due:
            raise ValidationError(
                f"Invalid repayment amount {amount} (total due: {total_due})",
                reason="invalid_amount",
            )

        balance = self.wallet.get_balance(user_id, CENTRAL_WALLET)
        if balance < amount:
            raise InsufficientFundsError(f"Insufficient balance: has {balance}, needs {amount}")

        self.wallet.set_balance(user_id, CENTRAL_WALLET, balance - amount)

        if amount >= min(exact_due, total_due):
            loan.status = LOAN_PAID
            loan.paid_at = self.now()
            loan.paid_amount = amount
            loan.interest_accrued = interest
        elif amount > interest:
            loan.principal -= amount - interest
            loan.interest_accrued = Decimal(0)
        else:
            loan.interest_accrued = interest - amount

        loan.last_interest_calc = today
        self.loans.save_loan(loan)

        logger.info(
            "Loan repayment",
            extra={
                "loan_id": loan_id,
                "user_id": user_id,
                "amount": str(amount),
                "status": loan.status,
            },
        )
        return RepaymentResult(
            loan_id=loan_id,
            amount_paid=amount,
            remaining_principal=loan.principal,
            remaining_interest=loan.interest_accrued,
            status=loan.status,
        )
