"""Domain models - pure Python dataclasses representing business entities"""

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

CENTRAL_WALLET = "central_wallet"

LOAN_ACTIVE = "active"
LOAN_PAID = "paid"
LOAN_STATUSES = (LOAN_ACTIVE, LOAN_PAID)

CARD_TYPES = ("credit", "debit", "merchant", "custom")


@dataclass(frozen=True)
class Policy:
    """Fee, rate and limit configuration of a card program"""

    id: str
    type: str  # credit | debit | merchant | custom
    annual_fee: Decimal
    interest_rate_monthly: Decimal  # percent
    transaction_fee: Decimal
    max_yearly_loans: Decimal
    min_interest_days: int
    name: str = ""
    description: str = ""
    brand_primary: str = ""
    brand_secondary: str = ""
    benefit_key: str = ""


@dataclass
class CardGrant:
    """Card held by a user"""

    id: str  # policy / card identifier, unique per user
    card_identifier: str
    type: str
    applied_at: datetime


@dataclass
class User:
    id: int
    username: str
    password_hash: str
    cards: List[CardGrant] = field(default_factory=list)
    balances: Dict[str, Decimal] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None


@dataclass
class Loan:
    """Short-term loan drawn against a card policy"""

    id: str
    user_id: int
    card_id: str
    principal: Decimal  # outstanding, shrinks on partial repayment
    original_principal: Decimal
    interest_rate_monthly: Decimal  # snapshot of the policy rate at creation
    interest_accrued: Decimal
    created_at: date
    due_date: date
    status: str
    last_interest_calc: date
    days_duration: int
    paid_at: Optional[datetime] = None
    paid_amount: Optional[Decimal] = None

    @property
    def is_active(self) -> bool:
        return self.status == LOAN_ACTIVE

    @property
    def total_due(self) -> Decimal:
        return self.principal + self.interest_accrued


@dataclass
class InterestPreview:
    """Interest quote for a prospective loan"""

    principal: Decimal
    interest_rate_monthly: Decimal
    days: int
    min_days: int
    effective_days: int
    daily_rate_percent: Decimal
    interest_amount: Decimal
    total_due: Decimal


@dataclass
class YearlyLimitUsage:
    used: Decimal
    max: Decimal
    remaining: Decimal
    can_borrow: bool


@dataclass
class LoanPreview:
    policy: Policy
    interest: InterestPreview
    yearly_limit: YearlyLimitUsage


@dataclass
class RepaymentResult:
    loan_id: str
    amount_paid: Decimal
    remaining_principal: Decimal
    remaining_interest: Decimal
    status: str


@dataclass
class SponsorCard:
    """Card program defined by a sponsoring organization"""

    id: str
    org_id: str
    public_identifier: str
    spec: Dict[str, Any]
    created_at: Optional[datetime] = None


@dataclass
class FraudReport:
    id: str
    user_id: int
    type: str
    description: str
    ip_address: str
    status: str = "pending"
    created_at: Optional[datetime] = None
