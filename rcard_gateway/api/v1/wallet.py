"""GET /v1/wallet - central wallet balance"""

from fastapi import APIRouter, Depends

from rcard_gateway.api.dependencies import get_current_user_id, get_wallet
from rcard_gateway.api.v1.schemas import WalletResponse, money
from rcard_gateway.domain.models import CENTRAL_WALLET
from rcard_gateway.domain.wallet import WalletLedger

router = APIRouter()


@router.get("/wallet", response_model=WalletResponse)
def get_wallet_balance(
    user_id: int = Depends(get_current_user_id),
    wallet: WalletLedger = Depends(get_wallet),
):
    return WalletResponse(
        balance_type=CENTRAL_WALLET,
        balance=money(wallet.get_balance(user_id, CENTRAL_WALLET)),
    )
