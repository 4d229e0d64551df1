"""
Wallet Repository for the transaction ledger and admin audit trail.
"""
from typing import List, Optional

from sqlalchemy import desc

from esports_arena.models import AdminAuditLog, WalletTransaction
from esports_arena.repositories.base import BaseRepository

_PENDING_WITHDRAWAL = (WalletTransaction.type == "withdrawal", WalletTransaction.status == "pending")


class WalletTransactionRepository(BaseRepository[WalletTransaction]):
    """Repository for wallet transactions."""

    def __init__(self, db):
        super().__init__(WalletTransaction, db)

    def _newest_first(self):
        return self.query().order_by(desc(WalletTransaction.timestamp), desc(WalletTransaction.id))

    def find_for_user(self, user_id: int) -> List[WalletTransaction]:
        return self._newest_first().filter(WalletTransaction.user_id == user_id).all()

    def find_recent(self, limit: int) -> List[WalletTransaction]:
        return self._newest_first().limit(limit).all()

    def find_pending_withdrawals(self) -> List[WalletTransaction]:
        """Oldest request first."""
        return (
            self.query()
            .filter(*_PENDING_WITHDRAWAL)
            .order_by(WalletTransaction.timestamp, WalletTransaction.id)
            .all()
        )

    def count_pending_withdrawals(self) -> int:
        return self.count(*_PENDING_WITHDRAWAL)


class AuditLogRepository(BaseRepository[AdminAuditLog]):
    """Repository for the admin audit trail."""

    def __init__(self, db):
        super().__init__(AdminAuditLog, db)

    def find_recent(self, admin_id: Optional[int] = None, limit: int = 20, offset: int = 0) -> List[AdminAuditLog]:
        query = self.query()
        if admin_id is not None:
            query = query.filter(AdminAuditLog.admin_id == admin_id)
        return (
            query.order_by(desc(AdminAuditLog.timestamp), desc(AdminAuditLog.id))
            .offset(offset)
            .limit(limit)
            .all()
        )
