"""
SQLAlchemy models for the esports arena.

Usage:
    from esports_arena.models import Tournament, Match
"""
from esports_arena.models.models import (
    Base,
    User,
    Game,
    Team,
    TeamMember,
    Tournament,
    TournamentRegistration,
    Match,
    LeaderboardEntry,
    WalletTransaction,
    AdminAuditLog,
)

__all__ = [
    "Base",
    "User",
    "Game",
    "Team",
    "TeamMember",
    "Tournament",
    "TournamentRegistration",
    "Match",
    "LeaderboardEntry",
    "WalletTransaction",
    "AdminAuditLog",
]
