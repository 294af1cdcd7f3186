"""POST /v1/auth/register and /v1/auth/login - account access"""

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from rcard_gateway.api.dependencies import get_account_service, get_rate_limiter, get_request_id
from rcard_gateway.api.v1.schemas import AuthResponse, CredentialsRequest, UserSchema
from rcard_gateway.config import settings
from rcard_gateway.domain.accounts import AccountService
from rcard_gateway.domain.rate_limit import RateLimiter
from rcard_gateway.infrastructure.database.session import get_db, unit_of_work
from rcard_gateway.infrastructure.security import create_access_token

router = APIRouter()


@router.post("/auth/register", response_model=AuthResponse, status_code=201)
def register(
    body: CredentialsRequest,
    request: Request,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
):
    """Create an account with an empty central wallet and return a session token"""
    with unit_of_work(db, get_request_id(request)):
        user = accounts.register(body.username, body.password)

    return AuthResponse(user=UserSchema.from_domain(user), access_token=create_access_token(user.id))


@router.post("/auth/login", response_model=AuthResponse)
def login(
    body: CredentialsRequest,
    request: Request,
    db: Session = Depends(get_db),
    accounts: AccountService = Depends(get_account_service),
    limiter: RateLimiter = Depends(get_rate_limiter),
):
    """
    Verify credentials and return a session token.

    Attempts are limited per username, successful or not.
    """
    limiter.check(
        body.username.strip().lower(),
        "login",
        settings.login_max_attempts,
        settings.login_window_seconds,
    )

    with unit_of_work(db, get_request_id(request)):
        user = accounts.authenticate(body.username, body.password)

    return AuthResponse(user=UserSchema.from_domain(user), access_token=create_access_token(user.id))
