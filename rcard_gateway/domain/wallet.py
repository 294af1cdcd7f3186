"""Wallet ledger - per-user cash balances"""

import logging
from decimal import Decimal

from rcard_gateway.domain.exceptions import UserNotFoundError
from rcard_gateway.domain.models import CENTRAL_WALLET

logger = logging.getLogger(__name__)


class WalletLedger:
    """
    Whole-value balance access.

    There is no increment primitive: callers read, compute the new value and
    set it within the same unit of work.
    """

    def __init__(self, users, balances):
        self.users = users
        self.balances = balances

    def get_balance(self, user_id: int, balance_type: str = CENTRAL_WALLET) -> Decimal:
        balance = self.balances.get_balance(user_id, balance_type)
        return balance if balance is not None else Decimal(0)

    def set_balance(self, user_id: int, balance_type: str, amount: Decimal) -> None:
        if self.users.get_user(user_id) is None:
            raise UserNotFoundError(f"User {user_id} not found")

        self.balances.set_balance(user_id, balance_type, Decimal(amount))
        logger.debug(
            "Balance set",
            extra={"user_id": user_id, "balance_type": balance_type, "amount": str(amount)},
        )
