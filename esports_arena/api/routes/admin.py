"""
Admin dashboard routes.

All routes require ``require_admin``; the admin id it returns is written
to the audit trail for every moderation action (withdrawal review,
ban/unban, KYC verification).
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request, status

from esports_arena.core import metrics
from esports_arena.core.logging import get_logger
from esports_arena.core.security import require_admin
from esports_arena.schemas import (
    AdminAuditLog,
    AuditLogCreate,
    CamelModel,
    DashboardStats,
    Tournament,
    UserPublic,
    UserUpdate,
    WalletTransaction,
)
from esports_arena.storage import Storage, get_storage
from esports_arena.storage.base import is_active_tournament

logger = get_logger(__name__)

router = APIRouter(prefix="/admin", tags=["admin"])

ACTIVE_TOURNAMENT_LIMIT = 10
RECENT_TRANSACTION_LIMIT = 20


# Request/Response models
class TransactionUser(CamelModel):
    id: int
    username: str
    display_name: str


class WithdrawalUser(TransactionUser):
    profile_image: Optional[str] = None
    kyc_verified: bool


class RecentTransaction(WalletTransaction):
    user: Optional[TransactionUser] = None


class PendingWithdrawal(WalletTransaction):
    user: Optional[WithdrawalUser] = None


class RejectWithdrawalRequest(CamelModel):
    reason: Optional[str] = None


class BanUserRequest(CamelModel):
    reason: Optional[str] = None


class ActiveTournament(Tournament):
    registrations_count: int
    game_name: str


class UserPage(CamelModel):
    users: List[UserPublic]
    total: int
    limit: int
    offset: int


def _client_ip(request: Request) -> Optional[str]:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def _audit(storage: Storage, request: Request, admin_id: int, action: str, entity_type: str, entity_id: int, details: str) -> None:
    storage.create_audit_log(AuditLogCreate(
        admin_id=admin_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details,
        ip_address=_client_ip(request),
    ))
    logger.info(f"Admin {admin_id} performed {action}", extra={"entity_type": entity_type, "entity_id": entity_id})


# ============================================================================
# Dashboard
# ============================================================================

@router.get("/dashboard-stats", response_model=DashboardStats)
async def get_dashboard_stats(
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    """Platform-wide totals for the admin dashboard."""
    stats = storage.get_dashboard_stats()
    metrics.update_dashboard_metrics(stats)
    return stats


@router.get("/recent-transactions", response_model=List[RecentTransaction])
async def get_recent_transactions(
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    """The latest transactions across all users."""
    rows = []
    for transaction in storage.get_recent_transactions(RECENT_TRANSACTION_LIMIT):
        user = storage.get_user(transaction.user_id)
        rows.append(RecentTransaction(
            **transaction.model_dump(),
            user=TransactionUser.model_validate(user) if user else None,
        ))
    return rows


@router.get("/active-tournaments", response_model=List[ActiveTournament])
async def get_active_tournaments(
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    """Tournaments currently running, with registration counts."""
    now = datetime.utcnow()
    active = [t for t in storage.get_tournaments() if is_active_tournament(t, now)]

    rows = []
    for tournament in active[:ACTIVE_TOURNAMENT_LIMIT]:
        game = storage.get_game(tournament.game_id)
        rows.append(ActiveTournament(
            **tournament.model_dump(),
            registrations_count=len(storage.get_tournament_registrations(tournament.id)),
            game_name=game.name if game else "Unknown Game",
        ))
    return rows


# ============================================================================
# Withdrawals
# ============================================================================

@router.get("/pending-withdrawals", response_model=List[PendingWithdrawal])
async def get_pending_withdrawals(
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    """Withdrawals awaiting review, oldest first, with the requester's KYC state."""
    rows = []
    for withdrawal in storage.get_pending_withdrawals():
        user = storage.get_user(withdrawal.user_id)
        rows.append(PendingWithdrawal(
            **withdrawal.model_dump(),
            user=WithdrawalUser.model_validate(user) if user else None,
        ))
    return rows


@router.put("/withdrawals/{transaction_id}/approve", response_model=WalletTransaction)
async def approve_withdrawal(
    transaction_id: int,
    request: Request,
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    transaction = storage.approve_withdrawal(transaction_id)
    metrics.record_withdrawal_review("approved")
    _audit(
        storage, request, admin_id,
        action="approve_withdrawal",
        entity_type="wallet_transaction",
        entity_id=transaction_id,
        details=f"Approved withdrawal transaction #{transaction_id} for {abs(transaction.amount)}",
    )
    return transaction


@router.put("/withdrawals/{transaction_id}/reject", response_model=WalletTransaction)
async def reject_withdrawal(
    transaction_id: int,
    request: Request,
    body: Optional[RejectWithdrawalRequest] = None,
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    """Refund the withdrawal to the user's wallet and mark it rejected."""
    reason = ((body.reason if body else None) or "").strip()
    if not reason:
        raise HTTPException(status_code=400, detail="Rejection reason is required")

    transaction = storage.reject_withdrawal(transaction_id, reason)
    metrics.record_withdrawal_review("rejected")
    _audit(
        storage, request, admin_id,
        action="reject_withdrawal",
        entity_type="wallet_transaction",
        entity_id=transaction_id,
        details=f"Rejected withdrawal transaction #{transaction_id} for {abs(transaction.amount)} with reason: {reason}",
    )
    return transaction


# ============================================================================
# Users
# ============================================================================

@router.get("/users", response_model=UserPage)
async def list_users(
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    users = storage.get_users(limit=limit, offset=offset)
    return UserPage(
        users=[user.to_public() for user in users],
        total=storage.get_users_count(),
        limit=limit,
        offset=offset,
    )


def _moderate(storage: Storage, user_id: int, changes: UserUpdate) -> UserPublic:
    if not storage.get_user(user_id):
        raise HTTPException(status_code=404, detail="User not found")
    return storage.update_user(user_id, changes).to_public()


@router.put("/users/{user_id}/ban", response_model=UserPublic)
async def ban_user(
    user_id: int,
    request: Request,
    body: Optional[BanUserRequest] = None,
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    user = _moderate(storage, user_id, UserUpdate(is_banned=True))
    _audit(
        storage, request, admin_id,
        action="ban_user",
        entity_type="user",
        entity_id=user_id,
        details=f"Banned user {user.username} (ID: {user_id}) with reason: {(body.reason if body else None) or 'No reason provided'}",
    )
    return user


@router.put("/users/{user_id}/unban", response_model=UserPublic)
async def unban_user(
    user_id: int,
    request: Request,
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    user = _moderate(storage, user_id, UserUpdate(is_banned=False))
    _audit(
        storage, request, admin_id,
        action="unban_user",
        entity_type="user",
        entity_id=user_id,
        details=f"Unbanned user {user.username} (ID: {user_id})",
    )
    return user


@router.put("/users/{user_id}/verify-kyc", response_model=UserPublic)
async def verify_kyc(
    user_id: int,
    request: Request,
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    user = _moderate(storage, user_id, UserUpdate(kyc_verified=True))
    _audit(
        storage, request, admin_id,
        action="verify_kyc",
        entity_type="user",
        entity_id=user_id,
        details=f"Verified KYC for user {user.username} (ID: {user_id})",
    )
    return user


# ============================================================================
# Audit trail
# ============================================================================

@router.get("/audit-logs", response_model=List[AdminAuditLog])
async def get_audit_logs(
    filter_admin_id: Optional[int] = Query(None, alias="adminId"),
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    """Audit entries, newest first."""
    return storage.get_audit_logs(filter_admin_id, limit, offset)


@router.post("/audit-logs", response_model=AdminAuditLog, status_code=status.HTTP_201_CREATED)
async def create_audit_log(
    body: AuditLogCreate,
    storage: Storage = Depends(get_storage),
    admin_id: int = Depends(require_admin)
):
    return storage.create_audit_log(body)
