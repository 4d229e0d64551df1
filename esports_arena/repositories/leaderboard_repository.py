"""
Leaderboard Repository for ranking rows.
"""
from typing import List, Optional

from esports_arena.models import LeaderboardEntry
from esports_arena.repositories.base import BaseRepository, matches_value


class LeaderboardRepository(BaseRepository[LeaderboardEntry]):
    """Repository for leaderboard entries."""

    def __init__(self, db):
        super().__init__(LeaderboardEntry, db)

    def find_ranked(self, period: str, game_id: Optional[int] = None, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        """Entries for a period by rank ascending, unranked rows last."""
        query = self.query().filter(LeaderboardEntry.period == period)
        if game_id is not None:
            query = query.filter(LeaderboardEntry.game_id == game_id)
        query = query.order_by(LeaderboardEntry.rank.is_(None), LeaderboardEntry.rank, LeaderboardEntry.id)
        if limit:
            query = query.limit(limit)
        return query.all()

    def find_for_user(self, user_id: int, game_id: Optional[int] = None) -> Optional[LeaderboardEntry]:
        criteria = [LeaderboardEntry.user_id == user_id]
        if game_id is not None:
            criteria.append(LeaderboardEntry.game_id == game_id)
        return self.where_first(*criteria)

    def find_by_key(self, user_id: Optional[int], team_id: Optional[int], game_id: Optional[int], period: str) -> Optional[LeaderboardEntry]:
        """The row identified by (user, team, game, period)."""
        return self.where_first(
            matches_value(LeaderboardEntry.user_id, user_id),
            matches_value(LeaderboardEntry.team_id, team_id),
            matches_value(LeaderboardEntry.game_id, game_id),
            LeaderboardEntry.period == period,
        )
