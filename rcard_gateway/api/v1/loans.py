"""Loan endpoints - preview, creation, accrual refresh and repayment"""

import time
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from rcard_gateway.api.dependencies import (
    get_card_service,
    get_current_user_id,
    get_loan_lifecycle,
    get_rate_limiter,
    get_request_id,
)
from rcard_gateway.api.v1.schemas import (
    BootstrapResponse,
    CardGrantSchema,
    LoanListResponse,
    LoanRequest,
    LoanResponse,
    LoanSchema,
    PolicySchema,
    PreviewResponse,
    PreviewSchema,
    RepaymentResponse,
    RepayRequest,
)
from rcard_gateway.config import settings
from rcard_gateway.domain.cards import CardService
from rcard_gateway.domain.exceptions import (
    ConflictError,
    InsufficientFundsError,
    NotFoundError,
    PolicyViolation,
    ValidationError,
)
from rcard_gateway.domain.loans import LoanLifecycle
from rcard_gateway.domain.models import LOAN_ACTIVE, LOAN_PAID
from rcard_gateway.domain.rate_limit import RateLimiter
from rcard_gateway.infrastructure.database.session import get_db, unit_of_work
from rcard_gateway.infrastructure.observability.logging import log_loan_rejection, log_repayment
from rcard_gateway.infrastructure.observability.metrics import (
    loan_rejection_counter,
    record_loan_created,
    record_repayment,
)

router = APIRouter()

# Refusals counted in rcard_loan_rejections_total
REJECTIONS = (ValidationError, NotFoundError, ConflictError, PolicyViolation, InsufficientFundsError)


@router.get("/loans/bootstrap", response_model=BootstrapResponse)
def bootstrap(
    user_id: int = Depends(get_current_user_id),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
    cards: CardService = Depends(get_card_service),
):
    """Active loans, held cards and their policies for the loan dashboard"""
    grants = cards.user_cards(user_id)
    return BootstrapResponse(
        loans=[LoanSchema.from_domain(loan) for loan in lifecycle.list_current(user_id, LOAN_ACTIVE)],
        cards=[CardGrantSchema.from_domain(grant) for grant in grants],
        policies={
            card_id: PolicySchema.from_domain(policy)
            for card_id, policy in cards.policies_for(grants).items()
        },
    )


@router.post("/loans/preview", response_model=PreviewResponse)
def preview_loan(
    body: LoanRequest,
    user_id: int = Depends(get_current_user_id),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
):
    """Quote interest for a prospective loan without creating it"""
    preview = lifecycle.preview(user_id, body.card_id, body.principal, body.days)
    return PreviewResponse(
        preview=PreviewSchema.from_domain(preview.interest, preview.yearly_limit),
        policy=PolicySchema.from_domain(preview.policy),
    )


@router.post("/loans", response_model=LoanResponse, status_code=201)
def create_loan(
    body: LoanRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Open a loan against a card's policy.

    Flow:
    1. Rate limit per user
    2. Check minimum duration and yearly cap
    3. Persist the active loan
    4. Return it with interest accrued so far (zero on day one)
    """
    request_id = get_request_id(request)
    limiter.check(
        str(user_id),
        "loan_create",
        settings.loan_create_max_attempts,
        settings.loan_create_window_seconds,
    )

    try:
        with unit_of_work(db, request_id):
            loan_id = lifecycle.create(user_id, body.card_id, body.principal, body.days)
    except REJECTIONS as e:
        loan_rejection_counter.labels(reason=e.reason).inc()
        log_loan_rejection(request_id, user_id, "loan_create", e.reason, str(e))
        raise

    record_loan_created(lifecycle.policy_lookup(body.card_id).type, body.principal)
    return LoanResponse(loan=LoanSchema.from_domain(lifecycle.get_current(user_id, loan_id)))


@router.get("/loans", response_model=LoanListResponse)
def list_loans(
    status: Optional[str] = None,
    user_id: int = Depends(get_current_user_id),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
):
    """The caller's loans, newest first, optionally filtered by status; an empty filter lists all"""
    return LoanListResponse(
        loans=[LoanSchema.from_domain(loan) for loan in lifecycle.list_current(user_id, status or None)]
    )


@router.get("/loans/{loan_id}", response_model=LoanResponse)
def get_loan(
    loan_id: str,
    user_id: int = Depends(get_current_user_id),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
):
    return LoanResponse(loan=LoanSchema.from_domain(lifecycle.get_current(user_id, loan_id)))


@router.post("/loans/{loan_id}/refresh", response_model=LoanResponse)
def refresh_loan_interest(
    loan_id: str,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
):
    """Persist interest accrued since the last calculation date"""
    with unit_of_work(db, get_request_id(request)):
        loan = lifecycle.refresh_interest(user_id, loan_id)

    return LoanResponse(loan=LoanSchema.from_domain(loan))


@router.post("/loans/{loan_id}/repay", response_model=RepaymentResponse)
def repay_loan(
    loan_id: str,
    body: RepayRequest,
    request: Request,
    user_id: int = Depends(get_current_user_id),
    db: Session = Depends(get_db),
    lifecycle: LoanLifecycle = Depends(get_loan_lifecycle),
):
    """
    Repay a loan from the central wallet.

    The wallet debit and the loan update commit together or not at all.
    """
    start_time = time.time()
    request_id = get_request_id(request)

    try:
        with unit_of_work(db, request_id):
            result = lifecycle.repay(user_id, loan_id, body.amount)
    except REJECTIONS as e:
        loan_rejection_counter.labels(reason=e.reason).inc()
        log_loan_rejection(request_id, user_id, "repayment", e.reason, str(e))
        raise

    duration_ms = (time.time() - start_time) * 1000
    record_repayment(result.status == LOAN_PAID, result.amount_paid)
    log_repayment(request_id, user_id, loan_id, str(result.amount_paid), result.status, duration_ms)

    return RepaymentResponse.from_domain(result)
