"""Pydantic schemas for API request/response validation"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from rcard_gateway.domain.interest import round_money
from rcard_gateway.domain.models import (
    CardGrant,
    InterestPreview,
    Loan,
    Policy,
    RepaymentResult,
    SponsorCard,
    User,
    YearlyLimitUsage,
)

CardType = Literal["credit", "debit", "merchant", "custom"]


def money(amount: Decimal) -> float:
    """Presentation value: half-up to cents"""
    return float(round_money(amount))


# Auth


class CredentialsRequest(BaseModel):
    """Request body for POST /v1/auth/register and /v1/auth/login"""

    username: str = Field(..., min_length=1, description="Login name")
    password: str = Field(..., min_length=1)


class CardGrantSchema(BaseModel):
    id: str
    card_identifier: str
    type: str
    applied_at: datetime

    @classmethod
    def from_domain(cls, grant: CardGrant) -> "CardGrantSchema":
        return cls(id=grant.id, card_identifier=grant.card_identifier, type=grant.type, applied_at=grant.applied_at)


class UserSchema(BaseModel):
    """Public view of a user (never includes the password hash)"""

    id: int
    username: str
    cards: List[CardGrantSchema]
    balances: Dict[str, float]
    created_at: Optional[datetime] = None
    last_login: Optional[datetime] = None

    @classmethod
    def from_domain(cls, user: User) -> "UserSchema":
        return cls(
            id=user.id,
            username=user.username,
            cards=[CardGrantSchema.from_domain(grant) for grant in user.cards],
            balances={name: money(amount) for name, amount in user.balances.items()},
            created_at=user.created_at,
            last_login=user.last_login,
        )


class AuthResponse(BaseModel):
    user: UserSchema
    access_token: str
    token_type: str = "bearer"


# Cards


class PolicySchema(BaseModel):
    id: str
    type: str
    name: str
    description: str
    annual_fee: float
    interest_rate_monthly: float
    transaction_fee: float
    max_yearly_loans: float
    min_interest_days: int
    brand_primary: str
    brand_secondary: str
    benefit_key: str

    @classmethod
    def from_domain(cls, policy: Policy) -> "PolicySchema":
        return cls(
            id=policy.id,
            type=policy.type,
            name=policy.name,
            description=policy.description,
            annual_fee=float(policy.annual_fee),
            interest_rate_monthly=float(policy.interest_rate_monthly),
            transaction_fee=float(policy.transaction_fee),
            max_yearly_loans=float(policy.max_yearly_loans),
            min_interest_days=policy.min_interest_days,
            brand_primary=policy.brand_primary,
            brand_secondary=policy.brand_secondary,
            benefit_key=policy.benefit_key,
        )


class CatalogResponse(BaseModel):
    """Response for GET /v1/cards/catalog"""

    catalog: Dict[str, List[PolicySchema]]
    default: PolicySchema


class CardApplyRequest(BaseModel):
    """Request body for POST /v1/cards/apply"""

    card_id: str = Field(..., min_length=1, description="Catalog id or sponsor public identifier")
    card_identifier: str = Field(..., min_length=1, description="Card number or label shown to the user")
    card_type: CardType = "custom"


class UserCardSchema(CardGrantSchema):
    policy: PolicySchema


class UserCardsResponse(BaseModel):
    cards: List[UserCardSchema]


class SponsorCardRequest(BaseModel):
    """Request body for POST /v1/sponsor/cards"""

    name: str = Field(..., min_length=1, max_length=100)
    public_identifier: Optional[str] = Field(None, min_length=3, max_length=60, pattern=r"^[A-Za-z0-9_\-]+$")
    policy_id: str = "default"
    card_type: CardType = "custom"
    annual_fee: Decimal = Field(Decimal(0), ge=0)
    interest_rate_monthly: Decimal = Field(Decimal(10), ge=0, description="Monthly rate in percent")
    transaction_fee: Decimal = Field(Decimal(0), ge=0)
    max_yearly_loans: Decimal = Field(Decimal(1000), gt=0)
    min_interest_days: int = Field(5, ge=1)
    brand_primary: str = "#6366f1"
    brand_secondary: str = "#818cf8"
    benefit_key: str = "default-benefits"
    hero_title: str = ""
    hero_subtitle: str = ""
    description: str = ""


class SponsorCardSchema(BaseModel):
    id: str
    org_id: str
    public_identifier: str
    created_at: Optional[datetime] = None
    spec: Dict[str, Any]
    policy: PolicySchema

    @classmethod
    def from_domain(cls, card: SponsorCard, policy: Policy) -> "SponsorCardSchema":
        return cls(
            id=card.id,
            org_id=card.org_id,
            public_identifier=card.public_identifier,
            created_at=card.created_at,
            spec=card.spec,
            policy=PolicySchema.from_domain(policy),
        )


class SponsorCardListResponse(BaseModel):
    cards: List[SponsorCardSchema]


# Loans


class LoanSchema(BaseModel):
    """Loan with interest accrued up to today"""

    id: str
    card_id: str
    principal: float
    original_principal: float
    interest_rate_monthly: float
    interest_accrued: float
    total_due: float
    created_at: date
    due_date: date
    status: str
    last_interest_calc: date
    days_duration: int
    paid_at: Optional[datetime] = None
    paid_amount: Optional[float] = None

    @classmethod
    def from_domain(cls, loan: Loan) -> "LoanSchema":
        return cls(
            id=loan.id,
            card_id=loan.card_id,
            principal=money(loan.principal),
            original_principal=money(loan.original_principal),
            interest_rate_monthly=float(loan.interest_rate_monthly),
            interest_accrued=money(loan.interest_accrued),
            total_due=money(loan.total_due),
            created_at=loan.created_at,
            due_date=loan.due_date,
            status=loan.status,
            last_interest_calc=loan.last_interest_calc,
            days_duration=loan.days_duration,
            paid_at=loan.paid_at,
            paid_amount=money(loan.paid_amount) if loan.paid_amount is not None else None,
        )


class LoanRequest(BaseModel):
    """Request body for POST /v1/loans and /v1/loans/preview"""

    card_id: str = Field(..., min_length=1, description="Card whose policy governs the loan")
    principal: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)
    days: int = Field(5, gt=0, le=3650)


class YearlyLimitSchema(BaseModel):
    used: float
    max: float
    remaining: float
    can_borrow: bool

    @classmethod
    def from_domain(cls, usage: YearlyLimitUsage) -> "YearlyLimitSchema":
        return cls(
            used=money(usage.used),
            max=money(usage.max),
            remaining=money(usage.remaining),
            can_borrow=usage.can_borrow,
        )


class PreviewSchema(BaseModel):
    principal: float
    interest_rate_monthly: float
    daily_rate: float  # percent
    days: int
    effective_days: int
    min_days: int
    interest_amount: float
    total_due: float
    yearly_limit: YearlyLimitSchema

    @classmethod
    def from_domain(cls, interest: InterestPreview, usage: YearlyLimitUsage) -> "PreviewSchema":
        return cls(
            principal=money(interest.principal),
            interest_rate_monthly=float(interest.interest_rate_monthly),
            daily_rate=float(interest.daily_rate_percent),
            days=interest.days,
            effective_days=interest.effective_days,
            min_days=interest.min_days,
            interest_amount=float(interest.interest_amount),
            total_due=float(interest.total_due),
            yearly_limit=YearlyLimitSchema.from_domain(usage),
        )


class PreviewResponse(BaseModel):
    """Response for POST /v1/loans/preview"""

    preview: PreviewSchema
    policy: PolicySchema


class LoanResponse(BaseModel):
    loan: LoanSchema


class LoanListResponse(BaseModel):
    loans: List[LoanSchema]


class BootstrapResponse(BaseModel):
    """Response for GET /v1/loans/bootstrap"""

    loans: List[LoanSchema]
    cards: List[CardGrantSchema]
    policies: Dict[str, PolicySchema]


class RepayRequest(BaseModel):
    """Request body for POST /v1/loans/{loan_id}/repay"""

    amount: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2)


class RepaymentResponse(BaseModel):
    loan_id: str
    amount_paid: float
    remaining_principal: float
    remaining_interest: float
    status: str

    @classmethod
    def from_domain(cls, result: RepaymentResult) -> "RepaymentResponse":
        return cls(
            loan_id=result.loan_id,
            amount_paid=money(result.amount_paid),
            remaining_principal=money(result.remaining_principal),
            remaining_interest=money(result.remaining_interest),
            status=result.status,
        )


# Wallet


class WalletResponse(BaseModel):
    """Response for GET /v1/wallet"""

    balance_type: str
    balance: float


# Fraud


class FraudReportRequest(BaseModel):
    """Request body for POST /v1/fraud-reports"""

    description: str = Field(..., min_length=1, max_length=5000)
    type: str = Field("general", max_length=50)


class FraudReportResponse(BaseModel):
    report_id: str
    status: str
