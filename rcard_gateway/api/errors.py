"""Map domain exceptions and request validation failures to HTTP responses"""

import logging

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from rcard_gateway.api.dependencies import get_request_id
from rcard_gateway.domain.exceptions import (
    AuthenticationError,
    ConflictError,
    DomainException,
    InsufficientFundsError,
    NotFoundError,
    PolicyViolation,
    RateLimitExceeded,
    StorageError,
    ValidationError,
)

# First match wins
STATUS_BY_EXCEPTION = (
    (ValidationError, 400),
    (AuthenticationError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (PolicyViolation, 422),
    (InsufficientFundsError, 422),
    (RateLimitExceeded, 429),
    (StorageError, 500),
)


def status_for(exc: DomainException) -> int:
    for exc_type, status_code in STATUS_BY_EXCEPTION:
        if isinstance(exc, exc_type):
            return status_code
    return 500


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    status_code = status_for(exc)
    request_id = get_request_id(request)

    if status_code >= 500:
        logging.error(f"Request failed: {exc}", extra={"request_id": request_id, "reason": exc.reason})
        detail = "Internal server error"
    else:
        logging.warning(f"Request rejected: {exc}", extra={"request_id": request_id, "reason": exc.reason})
        detail = str(exc)

    headers = {"WWW-Authenticate": "Bearer"} if status_code == 401 else None
    return JSONResponse(
        status_code=status_code,
        content={"detail": detail, "reason": exc.reason},
        headers=headers,
    )


def _describe(error: dict) -> str:
    field = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    return f"{field}: {error.get('msg', 'invalid value')}" if field else error.get("msg", "invalid value")


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed request bodies and parameters use the same 400 body as domain validation"""
    errors = exc.errors()
    amount_error = any(tuple(error.get("loc", ()))[:2] == ("body", "amount") for error in errors)
    reason = "invalid_amount" if amount_error else ValidationError.reason
    detail = "; ".join(_describe(error) for error in errors) or "Invalid request"

    logging.warning(
        f"Request rejected: {detail}",
        extra={"request_id": get_request_id(request), "reason": reason},
    )
    return JSONResponse(status_code=400, content={"detail": detail, "reason": reason})
