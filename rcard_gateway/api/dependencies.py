"""Dependency injection for FastAPI endpoints"""

from datetime import date
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from rcard_gateway.config import settings
from rcard_gateway.domain.accounts import AccountService
from rcard_gateway.domain.cards import CardService
from rcard_gateway.domain.exceptions import AuthenticationError
from rcard_gateway.domain.loans import LoanLifecycle
from rcard_gateway.domain.policies import PolicyCatalog
from rcard_gateway.domain.rate_limit import RateLimiter
from rcard_gateway.domain.wallet import WalletLedger
from rcard_gateway.infrastructure.database.repositories import (
    BalanceRepository,
    CardGrantRepository,
    LoanRepository,
    SponsorCardRepository,
    UserRepository,
)
from rcard_gateway.infrastructure.database.session import get_db
from rcard_gateway.infrastructure.security import decode_token, hash_password, verify_password
from rcard_gateway.utils.date_utils import today_in

bearer_scheme = HTTPBearer(auto_error=False)


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_client_ip(request: Request) -> str:
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "0.0.0.0"


def business_today() -> date:
    return today_in(settings.business_timezone)


def get_rate_limiter(request: Request) -> RateLimiter:
    return request.app.state.rate_limiter


def get_policy_catalog(request: Request) -> PolicyCatalog:
    return request.app.state.policy_catalog


def get_current_user_id(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> int:
    """Authenticated user id from the bearer token"""
    if credentials is None:
        raise AuthenticationError("Authentication required")

    payload = decode_token(credentials.credentials)
    if payload is None or not str(payload.get("sub", "")).isdigit():
        raise AuthenticationError("Invalid session")

    return int(payload["sub"])


def get_account_service(db: Session = Depends(get_db)) -> AccountService:
    return AccountService(UserRepository(db), hash_password, verify_password)


def get_card_service(
    db: Session = Depends(get_db),
    catalog: PolicyCatalog = Depends(get_policy_catalog),
) -> CardService:
    return CardService(
        users=UserRepository(db),
        grants=CardGrantRepository(db),
        sponsor_cards=SponsorCardRepository(db),
        catalog=catalog,
    )


def get_wallet(db: Session = Depends(get_db)) -> WalletLedger:
    return WalletLedger(UserRepository(db), BalanceRepository(db))


def get_loan_lifecycle(
    db: Session = Depends(get_db),
    cards: CardService = Depends(get_card_service),
    wallet: WalletLedger = Depends(get_wallet),
) -> LoanLifecycle:
    """Provide the loan lifecycle bound to this request's session"""
    return LoanLifecycle(
        users=UserRepository(db),
        loans=LoanRepository(db),
        wallet=wallet,
        policy_lookup=cards.lookup_policy,
        today=business_today,
        count_original_principal=settings.yearly_limit_uses_original_principal,
    )
