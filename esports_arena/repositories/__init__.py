"""
Repository layer for the SQL storage backend.

Usage:
    from esports_arena.repositories import TournamentRepository
    from esports_arena.core.database import get_session_factory

    with get_session_factory().begin() as db:
        upcoming = TournamentRepository(db).find_upcoming(limit=5)
"""

from esports_arena.repositories.base import BaseRepository
from esports_arena.repositories.leaderboard_repository import LeaderboardRepository
from esports_arena.repositories.team_repository import TeamMemberRepository, TeamRepository
from esports_arena.repositories.tournament_repository import (
    MatchRepository,
    RegistrationRepository,
    TournamentRepository,
)
from esports_arena.repositories.user_repository import UserRepository
from esports_arena.repositories.wallet_repository import AuditLogRepository, WalletTransactionRepository

__all__ = [
    "BaseRepository",
    "UserRepository",
    "TeamRepository",
    "TeamMemberRepository",
    "TournamentRepository",
    "RegistrationRepository",
    "MatchRepository",
    "LeaderboardRepository",
    "WalletTransactionRepository",
    "AuditLogRepository",
]
