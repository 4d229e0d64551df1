"""
Wallet routes.

Balances only move through transactions. Credits are positive and debits
negative (enforced by ``WalletTransactionRequest``); a debit that would
overdraw the wallet is refused.
"""
from typing import List

from fastapi import APIRouter, Depends, HTTPException, status

from esports_arena.core import metrics
from esports_arena.core.exceptions import StorageError
from esports_arena.core.logging import get_logger
from esports_arena.schemas import CamelModel, WalletTransaction, WalletTransactionCreate, WalletTransactionRequest
from esports_arena.storage import Storage, get_storage

logger = get_logger(__name__)

router = APIRouter(prefix="/users/{user_id}/wallet", tags=["wallet"])


class WalletSummary(CamelModel):
    balance: int
    transactions: List[WalletTransaction]


class TransactionReceipt(CamelModel):
    transaction: WalletTransaction
    new_balance: int


@router.get("", response_model=WalletSummary)
async def get_wallet(user_id: int, storage: Storage = Depends(get_storage)):
    """Current balance and transaction history, newest first."""
    user = storage.get_user(user_id)
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return WalletSummary(balance=user.wallet_balance, transactions=storage.get_wallet_transactions(user_id))


@router.post("/transactions", response_model=TransactionReceipt, status_code=status.HTTP_201_CREATED)
async def create_transaction(
    user_id: int,
    request: WalletTransactionRequest,
    storage: Storage = Depends(get_storage)
):
    """
    Record a transaction and apply it to the balance.

    Withdrawals start out ``pending`` and are debited immediately; an admin
    rejection refunds them.
    """
    try:
        user = storage.get_user(user_id)
        if not user:
            raise HTTPException(status_code=404, detail="User not found")

        if request.amount < 0 and user.wallet_balance + request.amount < 0:
            raise HTTPException(status_code=400, detail="Insufficient balance")

        transaction = storage.create_wallet_transaction(
            WalletTransactionCreate(user_id=user_id, **request.model_dump())
        )
        metrics.record_wallet_transaction(transaction.type)

        updated = storage.get_user(user_id)
        return TransactionReceipt(transaction=transaction, new_balance=updated.wallet_balance)

    except (HTTPException, StorageError):
        raise
    except Exception as e:
        logger.error(f"Error creating wallet transaction for user {user_id}: {e}")
        raise HTTPException(status_code=500, detail="Failed to create wallet transaction")
