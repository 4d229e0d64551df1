"""
User Repository for account data access.

Usage:
    repo = UserRepository(db)
    user = repo.find_by_username("ghostsniper")
    repo.adjust_balance(user.id, -500)
"""
from datetime import datetime
from typing import Optional

from esports_arena.models import User
from esports_arena.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for platform accounts."""

    def __init__(self, db):
        super().__init__(User, db)

    def find_by_username(self, username: str) -> Optional[User]:
        return self.where_first(User.username == username)

    def find_by_email(self, email: str) -> Optional[User]:
        return self.where_first(User.email == email)

    def count_active_since(self, cutoff: datetime) -> int:
        """Users whose last login is at or after ``cutoff``."""
        return self.count(User.last_login >= cutoff)

    def adjust_balance(self, user_id: int, amount: int) -> Optional[User]:
        """
        Add a signed amount to the wallet balance atomically.

        Returns the refreshed user, or None if no such user exists.
        """
        if not self.increment(user_id, "wallet_balance", amount):
            return None
        user = self.find_by_id(user_id)
        self.db.refresh(user)
        return user
