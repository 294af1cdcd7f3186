"""Domain-specific exceptions"""


class DomainException(Exception):
    """Base exception for domain layer"""

    reason = "domain_error"

    def __init__(self, message: str, reason: str | None = None):
        super().__init__(message)
        if reason is not None:
            self.reason = reason


class ValidationError(DomainException):
    """Malformed, missing or non-positive input"""

    reason = "invalid_input"


class AuthenticationError(DomainException):
    """Missing or invalid credentials"""

    reason = "unauthenticated"


class NotFoundError(DomainException):
    """Unknown user, loan or card"""

    reason = "not_found"


class UserNotFoundError(NotFoundError):
    reason = "user_not_found"


class LoanNotFoundError(NotFoundError):
    reason = "loan_not_found"


class CardNotFoundError(NotFoundError):
    reason = "card_not_found"


class ConflictError(DomainException):
    """Request conflicts with the current state of a record"""

    reason = "conflict"


class LoanNotActiveError(ConflictError):
    reason = "loan_not_active"


class DuplicateCardError(ConflictError):
    reason = "duplicate_card"


class PolicyViolation(DomainException):
    """Request breaks a card policy rule"""

    reason = "policy_violation"


class BelowMinimumDaysError(PolicyViolation):
    reason = "below_min_days"


class YearlyLimitExceededError(PolicyViolation):
    reason = "yearly_limit_exceeded"


class InsufficientFundsError(DomainException):
    """Wallet balance does not cover the requested debit"""

    reason = "insufficient_balance"


class RateLimitExceeded(DomainException):
    """Too many attempts for an action within its window"""

    reason = "rate_limited"


class StorageError(DomainException):
    """Underlying persistence failed"""

    reason = "storage_error"
